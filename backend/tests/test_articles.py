import json

import pytest
from sqlalchemy import select

from aimak.ai.gateway import FailureKind
from aimak.articles.models import Article, ArticleStatus
from aimak.articles.service import apply_status, resolve_status

from conftest import unparseable_gemini


def kz_article(category_id, **extra):
    payload = {
        "title_kz": "Сәтбаевта жаңа мектеп ашылды",
        "content_kz": "<p>Қалада 1200 орындық жаңа мектеп ашылды.</p>",
        "excerpt_kz": "Жаңа мектеп",
        "category_id": category_id,
    }
    payload.update(extra)
    return payload


def translation_reply(title="В Сатпаеве открылась новая школа", content="<p>Текст</p>", excerpt="Новая школа"):
    data = {"title": title, "content": content}
    if excerpt is not None:
        data["excerpt"] = excerpt
    return json.dumps(data, ensure_ascii=False)


async def load(db, article_id) -> Article:
    result = await db.execute(
        select(Article).where(Article.id == article_id).execution_options(populate_existing=True)
    )
    return result.scalar_one()


# ---- status rules ----

@pytest.mark.parametrize(
    "requested_status, published, expected",
    [
        (None, None, None),
        (None, True, ArticleStatus.PUBLISHED),
        (None, False, ArticleStatus.DRAFT),
        (ArticleStatus.REVIEW, True, ArticleStatus.REVIEW),
        (ArticleStatus.PUBLISHED, None, ArticleStatus.PUBLISHED),
    ],
)
def test_resolve_status(requested_status, published, expected):
    assert resolve_status(requested_status, published) == expected


def test_apply_status_keeps_first_publication_date():
    article = Article(published_at=None)
    apply_status(article, ArticleStatus.PUBLISHED)
    first = article.published_at
    assert first is not None and article.published is True

    apply_status(article, ArticleStatus.ARCHIVED)
    assert article.published is False
    assert article.published_at == first

    apply_status(article, ArticleStatus.PUBLISHED)
    assert article.published_at == first


# ---- create ----

async def test_create_with_kazakh_only_translates_once(client, editor_headers, fake_ai, categories, editor):
    fake_ai.replies = [translation_reply()]

    res = await client.post("/articles/", json=kz_article(categories[0].id), headers=editor_headers)

    assert res.status_code == 201, res.text
    body = res.json()
    assert fake_ai.calls == 1
    assert body["title_ru"] == "В Сатпаеве открылась новая школа"
    assert body["content_ru"] == "<p>Текст</p>"
    assert body["excerpt_ru"] == "Новая школа"
    assert body["slug_kz"] == "сәтбаевта-жаңа-мектеп-ашылды"
    assert body["slug_ru"] == "в-сатпаеве-открылась-новая-школа"
    assert body["status"] == "DRAFT"
    assert body["published"] is False
    assert body["published_at"] is None
    assert body["author"] == {"id": editor.id, "name": editor.name}
    assert body["category"]["slug"] == "zhanalyqtar"


async def test_create_survives_translation_failure(client, editor_headers, fake_ai, categories):
    fake_ai.replies = [fake_ai.fail_with(FailureKind.HTTP_ERROR, "HTTP 503")]

    res = await client.post("/articles/", json=kz_article(categories[0].id), headers=editor_headers)

    assert res.status_code == 201, res.text
    body = res.json()
    assert fake_ai.calls == 1
    assert body["title_ru"] is None
    assert body["content_ru"] is None
    assert body["slug_ru"] is None


async def test_create_falls_back_when_gemini_reply_is_unparseable(client, editor_headers, gateway, fake_ai, categories):
    gateway.adapters = [unparseable_gemini(), fake_ai]
    fake_ai.replies = [translation_reply()]

    res = await client.post("/articles/", json=kz_article(categories[0].id), headers=editor_headers)

    assert res.status_code == 201, res.text
    assert res.json()["title_ru"] == "В Сатпаеве открылась новая школа"
    assert fake_ai.calls == 1


async def test_create_survives_unparseable_gemini_reply(client, editor_headers, gateway, categories):
    gateway.adapters = [unparseable_gemini()]

    res = await client.post("/articles/", json=kz_article(categories[0].id), headers=editor_headers)

    assert res.status_code == 201, res.text
    assert res.json()["title_ru"] is None


async def test_create_survives_unconfigured_ai(client, editor_headers, gateway, categories):
    gateway.adapters = []
    res = await client.post("/articles/", json=kz_article(categories[0].id), headers=editor_headers)
    assert res.status_code == 201
    assert res.json()["title_ru"] is None


async def test_create_survives_malformed_translation(client, editor_headers, fake_ai, categories):
    fake_ai.replies = ["not json at all"]
    res = await client.post("/articles/", json=kz_article(categories[0].id), headers=editor_headers)
    assert res.status_code == 201
    assert res.json()["content_ru"] is None


async def test_create_only_fills_missing_russian_fields(client, editor_headers, fake_ai, categories):
    fake_ai.replies = [translation_reply(title="Машинный заголовок")]

    res = await client.post(
        "/articles/",
        json=kz_article(categories[0].id, content_ru="<p>Редакторский текст</p>"),
        headers=editor_headers,
    )

    body = res.json()
    assert body["title_ru"] == "Машинный заголовок"
    assert body["content_ru"] == "<p>Редакторский текст</p>"


async def test_create_with_both_languages_skips_translation(client, editor_headers, fake_ai, categories):
    res = await client.post(
        "/articles/",
        json=kz_article(categories[0].id, title_ru="Новая школа", content_ru="<p>Текст</p>"),
        headers=editor_headers,
    )
    assert res.status_code == 201
    assert fake_ai.calls == 0


async def test_create_auto_translate_disabled(client, editor_headers, fake_ai, categories):
    res = await client.post(
        "/articles/", json=kz_article(categories[0].id, auto_translate=False), headers=editor_headers,
    )
    assert res.status_code == 201
    assert fake_ai.calls == 0


async def test_create_published_sets_status_and_date(client, editor_headers, categories):
    res = await client.post(
        "/articles/", json=kz_article(categories[0].id, published=True, auto_translate=False), headers=editor_headers,
    )
    body = res.json()
    assert body["status"] == "PUBLISHED"
    assert body["published"] is True
    assert body["published_at"] is not None


async def test_duplicate_titles_get_suffixed_slugs(client, editor_headers, categories):
    slugs = []
    for _ in range(3):
        res = await client.post(
            "/articles/", json=kz_article(categories[0].id, auto_translate=False), headers=editor_headers,
        )
        slugs.append(res.json()["slug_kz"])
    assert slugs == [
        "сәтбаевта-жаңа-мектеп-ашылды",
        "сәтбаевта-жаңа-мектеп-ашылды-2",
        "сәтбаевта-жаңа-мектеп-ашылды-3",
    ]


async def test_create_with_tags(client, editor_headers, categories, tags):
    res = await client.post(
        "/articles/",
        json=kz_article(categories[0].id, auto_translate=False, tag_ids=[tags[0].id, tags[1].id]),
        headers=editor_headers,
    )
    assert sorted(t["slug"] for t in res.json()["tags"]) == ["ekonomika", "saylau"]


async def test_create_with_unknown_category_is_400(client, editor_headers, categories):
    res = await client.post("/articles/", json=kz_article(9999, auto_translate=False), headers=editor_headers)
    assert res.status_code == 400


async def test_create_requires_editor(client, reader_headers, categories):
    res = await client.post("/articles/", json=kz_article(categories[0].id), headers=reader_headers)
    assert res.status_code == 403
    res = await client.post("/articles/", json=kz_article(categories[0].id))
    assert res.status_code == 401


# ---- update ----

async def _create(client, headers, category_id, **extra):
    res = await client.post(
        "/articles/", json=kz_article(category_id, auto_translate=False, **extra), headers=headers,
    )
    assert res.status_code == 201, res.text
    return res.json()


async def test_publishing_via_legacy_flag(client, editor_headers, categories, db):
    created = await _create(client, editor_headers, categories[0].id)

    res = await client.patch(f"/articles/{created['id']}", json={"published": True}, headers=editor_headers)

    assert res.status_code == 200, res.text
    body = res.json()
    assert body["status"] == "PUBLISHED"
    assert body["published"] is True
    assert body["published_at"] is not None

    stored = await load(db, created["id"])
    assert stored.status == ArticleStatus.PUBLISHED
    assert stored.published_at is not None


async def test_unpublishing_keeps_published_at(client, editor_headers, categories, db):
    created = await _create(client, editor_headers, categories[0].id, status="PUBLISHED")
    first_published_at = (await load(db, created["id"])).published_at

    res = await client.patch(f"/articles/{created['id']}", json={"published": False}, headers=editor_headers)
    body = res.json()
    assert body["status"] == "DRAFT"
    assert body["published"] is False
    assert body["published_at"] is not None

    await client.patch(f"/articles/{created['id']}", json={"status": "PUBLISHED"}, headers=editor_headers)
    assert (await load(db, created["id"])).published_at == first_published_at


async def test_status_field_wins_over_published_flag(client, editor_headers, categories):
    created = await _create(client, editor_headers, categories[0].id)
    res = await client.patch(
        f"/articles/{created['id']}", json={"status": "REVIEW", "published": True}, headers=editor_headers,
    )
    body = res.json()
    assert body["status"] == "REVIEW"
    assert body["published"] is False
    assert body["published_at"] is None


async def test_title_change_rederives_slug(client, editor_headers, categories):
    created = await _create(client, editor_headers, categories[0].id)
    res = await client.patch(
        f"/articles/{created['id']}",
        json={"title_kz": "Жаңа тақырып", "title_ru": "Новый заголовок"},
        headers=editor_headers,
    )
    body = res.json()
    assert body["slug_kz"] == "жаңа-тақырып"
    assert body["slug_ru"] == "новый-заголовок"


async def test_clearing_russian_title_drops_russian_slug(client, editor_headers, categories):
    created = await _create(client, editor_headers, categories[0].id, title_ru="Школа", content_ru="Текст")
    assert created["slug_ru"] == "школа"

    res = await client.patch(f"/articles/{created['id']}", json={"title_ru": None}, headers=editor_headers)

    body = res.json()
    assert body["title_ru"] is None
    assert body["slug_ru"] is None
    assert (await client.get("/articles/slug/школа")).status_code == 404


async def test_same_title_keeps_own_slug(client, editor_headers, categories):
    created = await _create(client, editor_headers, categories[0].id)
    res = await client.patch(
        f"/articles/{created['id']}", json={"title_kz": created["title_kz"]}, headers=editor_headers,
    )
    assert res.json()["slug_kz"] == created["slug_kz"]


async def test_tags_replaced_with_fields_in_one_update(client, editor_headers, categories, tags):
    created = await _create(client, editor_headers, categories[0].id, tag_ids=[tags[0].id])

    res = await client.patch(
        f"/articles/{created['id']}",
        json={"excerpt_kz": "Жаңартылды", "tag_ids": [tags[1].id]},
        headers=editor_headers,
    )

    body = res.json()
    assert body["excerpt_kz"] == "Жаңартылды"
    assert [t["slug"] for t in body["tags"]] == ["ekonomika"]


async def test_failed_tag_relink_leaves_article_untouched(client, editor_headers, categories, tags, db):
    created = await _create(client, editor_headers, categories[0].id, tag_ids=[tags[0].id])

    res = await client.patch(
        f"/articles/{created['id']}",
        json={"title_kz": "Өзгерген тақырып", "tag_ids": [tags[1].id, 4242]},
        headers=editor_headers,
    )

    assert res.status_code == 400
    stored = await load(db, created["id"])
    assert stored.title_kz == created["title_kz"]
    assert stored.slug_kz == created["slug_kz"]


async def test_only_author_or_admin_may_update(
    client, editor_headers, other_editor_headers, admin_headers, categories,
):
    created = await _create(client, editor_headers, categories[0].id)

    res = await client.patch(f"/articles/{created['id']}", json={"is_pinned": True}, headers=other_editor_headers)
    assert res.status_code == 403

    res = await client.patch(f"/articles/{created['id']}", json={"is_pinned": True}, headers=admin_headers)
    assert res.status_code == 200
    assert res.json()["is_pinned"] is True


async def test_update_missing_article_is_404(client, editor_headers):
    res = await client.patch("/articles/777", json={"is_pinned": True}, headers=editor_headers)
    assert res.status_code == 404


# ---- read / list ----

async def test_get_by_id_and_slug_count_views(client, editor_headers, categories):
    created = await _create(client, editor_headers, categories[0].id, title_ru="Школа", content_ru="Текст")

    first = await client.get(f"/articles/{created['id']}")
    assert first.json()["views"] == 1

    by_kz = await client.get(f"/articles/slug/{created['slug_kz']}")
    assert by_kz.json()["views"] == 2

    by_ru = await client.get("/articles/slug/школа")
    assert by_ru.json()["id"] == created["id"]
    assert by_ru.json()["views"] == 3

    missing = await client.get("/articles/slug/joq")
    assert missing.status_code == 404


async def test_list_filters_and_pagination(client, editor_headers, categories, tags):
    await _create(client, editor_headers, categories[0].id, title_kz="Бірінші", published=True)
    await _create(client, editor_headers, categories[1].id, title_kz="Екінші", tag_ids=[tags[0].id])
    await _create(client, editor_headers, categories[1].id, title_kz="Үшінші", is_pinned=True, published=True)

    res = await client.get("/articles/", params={"published": "true"})
    body = res.json()
    assert body["meta"]["total"] == 2
    assert body["data"][0]["title_kz"] == "Үшінші"

    res = await client.get("/articles/", params={"category_slug": "sayasat"})
    assert {a["title_kz"] for a in res.json()["data"]} == {"Екінші", "Үшінші"}

    res = await client.get("/articles/", params={"tag_slug": "saylau"})
    assert [a["title_kz"] for a in res.json()["data"]] == ["Екінші"]

    res = await client.get("/articles/", params={"status": "DRAFT"})
    assert [a["title_kz"] for a in res.json()["data"]] == ["Екінші"]

    res = await client.get("/articles/", params={"q": "інші"})
    assert res.json()["meta"]["total"] == 3

    res = await client.get("/articles/", params={"page": 2, "limit": 2})
    body = res.json()
    assert body["meta"] == {"page": 2, "limit": 2, "total": 3, "total_pages": 2}
    assert len(body["data"]) == 1

    res = await client.get("/articles/", params={"limit": 101})
    assert res.status_code == 422


# ---- delete ----

async def test_delete_respects_ownership(client, editor_headers, other_editor_headers, categories, tags):
    created = await _create(client, editor_headers, categories[0].id, tag_ids=[tags[0].id])

    res = await client.delete(f"/articles/{created['id']}", headers=other_editor_headers)
    assert res.status_code == 403

    res = await client.delete(f"/articles/{created['id']}", headers=editor_headers)
    assert res.status_code == 204
    assert (await client.get(f"/articles/{created['id']}")).status_code == 404


async def test_delete_many(client, editor_headers, other_editor_headers, categories):
    mine = [await _create(client, editor_headers, categories[0].id, title_kz=f"Мақала {i}") for i in range(2)]
    theirs = await _create(client, other_editor_headers, categories[0].id, title_kz="Бөтен")

    res = await client.post(
        "/articles/delete-many",
        json={"ids": [mine[0]["id"], mine[1]["id"], theirs["id"], 999]},
        headers=editor_headers,
    )

    assert res.status_code == 200
    body = res.json()
    assert body["deleted"] == 2
    assert sorted(body["deleted_ids"]) == sorted(a["id"] for a in mine)
    assert body["forbidden"] == [theirs["id"]]
    assert body["not_found"] == [999]

    listing = await client.get("/articles/")
    assert [a["id"] for a in listing.json()["data"]] == [theirs["id"]]


# ---- bulk categorization ----

async def test_categorize_all(client, admin_headers, editor_headers, fake_ai, categories, monkeypatch):
    from aimak.config import settings
    monkeypatch.setattr(settings, "AI_CATEGORIZE_ALL_DELAY_SECONDS", 0)

    a = await _create(client, editor_headers, categories[0].id, title_kz="Парламент")
    b = await _create(client, editor_headers, categories[0].id, title_kz="Театр")
    c = await _create(client, editor_headers, categories[0].id, title_kz="Белгісіз")
    d = await _create(client, editor_headers, categories[0].id, title_kz="Қате")

    # newest first: d, c, b, a
    fake_ai.replies = [
        fake_ai.fail_with(FailureKind.NETWORK, "timeout"),
        "I am not sure",
        "madeniyet",
        "zhanalyqtar",
    ]

    res = await client.post("/articles/categorize-all", headers=admin_headers)

    assert res.status_code == 200, res.text
    body = res.json()
    assert body["success"] is True
    assert body["stats"] == {"total": 4, "updated": 1, "skipped": 2, "errors": 1}

    moved = await client.get(f"/articles/{b['id']}")
    assert moved.json()["category"]["slug"] == "madeniyet"
    untouched = await client.get(f"/articles/{a['id']}")
    assert untouched.json()["category"]["slug"] == "zhanalyqtar"
    assert c["id"] and d["id"]


async def test_categorize_all_is_admin_only(client, editor_headers):
    res = await client.post("/articles/categorize-all", headers=editor_headers)
    assert res.status_code == 403


async def test_categorize_all_without_categories(client, admin_headers):
    res = await client.post("/articles/categorize-all", headers=admin_headers)
    body = res.json()
    assert body["success"] is False
    assert body["message"] == "No categories found"
