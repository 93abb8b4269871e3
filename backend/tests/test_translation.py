import json

import pytest

from aimak.ai.errors import AIConfigurationError, AITranslationFormatError, AIValidationError
from aimak.ai.gateway import AIGateway, FailureKind
from aimak.translation.schemas import Language
from aimak.translation.service import TranslationService


@pytest.fixture()
def translator(gateway):
    return TranslationService(gateway)


async def test_same_language_is_rejected_before_any_call(translator, fake_ai):
    with pytest.raises(AIValidationError):
        await translator.translate("Сәлем", Language.KAZAKH, Language.KAZAKH)
    with pytest.raises(AIValidationError):
        await translator.translate_article("Тақырып", "Мәтін", Language.RUSSIAN, Language.RUSSIAN)
    assert fake_ai.calls == 0


async def test_empty_input_is_rejected_before_any_call(translator, fake_ai):
    with pytest.raises(AIValidationError):
        await translator.translate("   ", Language.KAZAKH, Language.RUSSIAN)
    with pytest.raises(AIValidationError):
        await translator.translate_article("Тақырып", "", Language.KAZAKH, Language.RUSSIAN)
    assert fake_ai.calls == 0


async def test_validation_runs_before_configuration_check():
    translator = TranslationService(AIGateway(adapters=[]))
    with pytest.raises(AIValidationError):
        await translator.translate("text", Language.RUSSIAN, Language.RUSSIAN)
    with pytest.raises(AIConfigurationError):
        await translator.translate("text", Language.RUSSIAN, Language.KAZAKH)


async def test_translate_text(translator, fake_ai):
    fake_ai.replies = ["  Привет, мир  "]
    assert await translator.translate("Сәлем, әлем", Language.KAZAKH, Language.RUSSIAN) == "Привет, мир"
    assert "Kazakh" in fake_ai.prompts[0]
    assert "Сәлем, әлем" in fake_ai.prompts[0]


async def test_translate_article_parses_fenced_json(translator, fake_ai):
    payload = {"title": "Новая школа", "excerpt": "Кратко", "content": "<p>Текст</p>"}
    fake_ai.replies = [f"```json\n{json.dumps(payload, ensure_ascii=False)}\n```"]

    result = await translator.translate_article(
        "Жаңа мектеп", "<p>Мәтін</p>", Language.KAZAKH, Language.RUSSIAN, excerpt="Қысқаша",
    )

    assert result.title == "Новая школа"
    assert result.content == "<p>Текст</p>"
    assert result.excerpt == "Кратко"
    assert '"excerpt"' in fake_ai.prompts[0]


async def test_excerpt_not_requested_when_input_has_none(translator, fake_ai):
    fake_ai.replies = ['{"title": "Заголовок", "content": "Текст", "excerpt": "лишнее"}']

    result = await translator.translate_article("Тақырып", "Мәтін", Language.KAZAKH, Language.RUSSIAN)

    assert result.excerpt is None
    assert "Excerpt:" not in fake_ai.prompts[0]


@pytest.mark.parametrize(
    "reply",
    [
        "Sorry, I cannot translate this.",
        '{"title": "Только заголовок"}',
        '{"title": "", "content": "Текст"}',
        '{"title": "Заголовок", "content": ',
    ],
)
async def test_malformed_article_reply(translator, fake_ai, reply):
    fake_ai.replies = [reply]
    with pytest.raises(AITranslationFormatError) as exc_info:
        await translator.translate_article("Тақырып", "Мәтін", Language.KAZAKH, Language.RUSSIAN)
    assert exc_info.value.message == "Translation returned invalid format. Please try again."


async def test_text_endpoint(client, editor_headers, fake_ai):
    fake_ai.replies = ["Привет"]
    res = await client.post(
        "/translation/text",
        json={"text": "Сәлем", "source_language": "kz", "target_language": "ru"},
        headers=editor_headers,
    )
    assert res.status_code == 200
    assert res.json() == {"translated_text": "Привет"}


async def test_text_endpoint_same_language_is_400(client, editor_headers, fake_ai):
    res = await client.post(
        "/translation/text",
        json={"text": "Сәлем", "source_language": "kz", "target_language": "kz"},
        headers=editor_headers,
    )
    assert res.status_code == 400
    assert res.json()["code"] == "invalid_input"
    assert fake_ai.calls == 0


async def test_article_endpoint_provider_failure_is_502(client, editor_headers, fake_ai):
    fake_ai.replies = [fake_ai.fail_with(FailureKind.HTTP_ERROR, "HTTP 500")]
    res = await client.post(
        "/translation/article",
        json={"title": "Тақырып", "content": "Мәтін"},
        headers=editor_headers,
    )
    assert res.status_code == 502
    assert res.json()["code"] == "ai_unavailable"


async def test_translation_requires_editor(client, reader_headers):
    res = await client.post(
        "/translation/text",
        json={"text": "Сәлем", "source_language": "kz", "target_language": "ru"},
        headers=reader_headers,
    )
    assert res.status_code == 403
