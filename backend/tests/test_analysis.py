import json
from types import SimpleNamespace

import pytest

from aimak.ai.errors import (
    AIConfigurationError,
    AIContentBlockedError,
    AINoCandidatesError,
    AIProviderError,
    AIResponseFormatError,
)
from aimak.ai.gateway import AIGateway, FailureKind
from aimak.articles.services.analysis import (
    EditorialAnalysisAdvisor,
    coerce_score,
    normalize_improvement,
)
from aimak.translation.schemas import Language

from conftest import FakeAdapter


def article(**overrides):
    fields = dict(
        title_kz="Сәтбаевта жаңа мектеп",
        content_kz="<p>Қалада жаңа мектеп ашылды.</p>",
        excerpt_kz="Қысқаша",
        title_ru=None,
        content_ru=None,
        excerpt_ru=None,
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


def analysis_reply(**overrides):
    data = {
        "score": 7,
        "summary": "Жақсы мақала",
        "suggestions": ["Дереккөз қосыңыз"],
        "strengths": ["Нақты тақырып"],
        "improvements": {"title": "Сәтбаевта заманауи мектеп ашылды", "excerpt": "Жаңа мектеп"},
    }
    data.update(overrides)
    return "```json\n" + json.dumps(data, ensure_ascii=False) + "\n```"


@pytest.mark.parametrize(
    "value, language, expected",
    [
        ("Тақырып", Language.KAZAKH, "Тақырып"),
        ({"kk": "Қазақша", "ru": "По-русски"}, Language.KAZAKH, "Қазақша"),
        ({"kk": "Қазақша", "ru": "По-русски"}, Language.RUSSIAN, "По-русски"),
        ({"Kazakh": "", "russian": "Только русский"}, Language.KAZAKH, "Только русский"),
        ({"text": "Generic"}, Language.RUSSIAN, "Generic"),
        ({"en": "English only"}, Language.KAZAKH, ""),
        (None, Language.KAZAKH, ""),
        (["list"], Language.KAZAKH, ""),
    ],
)
def test_normalize_improvement(value, language, expected):
    assert normalize_improvement(value, language) == expected


@pytest.mark.parametrize(
    "value, expected",
    [(7, 7), ("8/10", 8), ("8,6", 9), (15, 10), (-3, 0), (None, 0), ("n/a", 0), (True, 0)],
)
def test_coerce_score(value, expected):
    assert coerce_score(value) == expected


async def test_language_keyed_improvements_become_strings(gateway, fake_ai):
    fake_ai.replies = [analysis_reply(
        score="9",
        suggestions="Бір ғана ұсыныс",
        improvements={"title": {"kk": "Жаңа тақырып", "ru": "Новый заголовок"}, "excerpt": {"ru": "Анонс"}},
    )]

    result = await EditorialAnalysisAdvisor(gateway).analyze(article(), Language.KAZAKH)

    assert result.score == 9
    assert result.suggestions == ["Бір ғана ұсыныс"]
    assert result.improvements.title == "Жаңа тақырып"
    assert result.improvements.excerpt == "Анонс"


async def test_prompt_mentions_bilingual_consistency_only_with_both_languages(gateway, fake_ai):
    fake_ai.replies = [analysis_reply(), analysis_reply()]
    advisor = EditorialAnalysisAdvisor(gateway)

    await advisor.analyze(article(), Language.KAZAKH)
    await advisor.analyze(article(title_ru="Новая школа", content_ru="Текст"), Language.RUSSIAN)

    assert "Bilingual consistency" not in fake_ai.prompts[0]
    assert "Bilingual consistency" in fake_ai.prompts[1]
    assert "Russian (Русский)" in fake_ai.prompts[1]


@pytest.mark.parametrize(
    "kind, error",
    [
        (FailureKind.BLOCKED, AIContentBlockedError),
        (FailureKind.NO_CANDIDATES, AINoCandidatesError),
        (FailureKind.NETWORK, AIProviderError),
    ],
)
async def test_failure_causes_are_distinct(gateway, fake_ai, kind, error):
    fake_ai.replies = [fake_ai.fail_with(kind)]
    with pytest.raises(error) as exc_info:
        await EditorialAnalysisAdvisor(gateway).analyze(article())
    assert type(exc_info.value) is error


async def test_blocked_primary_with_failing_secondary_reports_blocked():
    primary = FakeAdapter("gemini")
    primary.replies = [primary.fail_with(FailureKind.BLOCKED, "Content blocked: SAFETY")]
    secondary = FakeAdapter("openrouter")
    secondary.replies = [secondary.fail_with(FailureKind.RATE_LIMITED)]

    with pytest.raises(AIContentBlockedError):
        await EditorialAnalysisAdvisor(AIGateway(adapters=[primary, secondary])).analyze(article())


async def test_invalid_json_is_a_format_error(gateway, fake_ai):
    fake_ai.replies = ["Мақала жақсы, бірақ..."]
    with pytest.raises(AIResponseFormatError):
        await EditorialAnalysisAdvisor(gateway).analyze(article())


async def test_unconfigured():
    with pytest.raises(AIConfigurationError):
        await EditorialAnalysisAdvisor(AIGateway(adapters=[])).analyze(article())


async def test_analyze_endpoint(client, editor_headers, fake_ai):
    fake_ai.replies = [analysis_reply(improvements={"title": {"ru": "Заголовок"}, "excerpt": "Анонс"})]

    res = await client.post(
        "/articles/analyze",
        json={"title_kz": "Тақырып", "content_kz": "Мәтін", "language": "ru"},
        headers=editor_headers,
    )

    assert res.status_code == 200
    body = res.json()
    assert body["score"] == 7
    assert body["improvements"] == {"title": "Заголовок", "excerpt": "Анонс"}


async def test_analyze_endpoint_blocked_is_422(client, editor_headers, fake_ai):
    fake_ai.replies = [fake_ai.fail_with(FailureKind.BLOCKED)]
    res = await client.post(
        "/articles/analyze",
        json={"title_kz": "Тақырып", "content_kz": "Мәтін"},
        headers=editor_headers,
    )
    assert res.status_code == 422
    assert res.json()["code"] == "ai_content_blocked"
