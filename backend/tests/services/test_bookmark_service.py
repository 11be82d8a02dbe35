"""
Tests for bookmark service layer functionality.

Covers CRUD, reordering and the paginated query builder: filter combination,
the uncategorized sentinel, pinned-first ordering and pagination arithmetic.
"""
from collections.abc import Awaitable, Callable

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.bookmark import Bookmark
from schemas.bookmark import BookmarkCreate, BookmarkQuery, BookmarkUpdate, ReorderItem
from services.bookmark_service import (
    build_pagination,
    create_bookmark,
    delete_bookmark,
    escape_like,
    get_bookmark,
    list_bookmarks,
    reorder_bookmarks,
    search_bookmarks,
    update_bookmark,
)

MakeBookmark = Callable[..., Awaitable[Bookmark]]


# =============================================================================
# CRUD
# =============================================================================


async def test__create_bookmark__assigns_defaults(db_session: AsyncSession) -> None:
    bookmark = await create_bookmark(
        db_session,
        BookmarkCreate(url='https://example.com', title='Example', category='dev'),
    )

    assert bookmark.id
    assert bookmark.url == 'https://example.com'
    assert bookmark.category == 'dev'
    assert bookmark.order_index == 0
    assert bookmark.is_pinned is False
    assert bookmark.is_read is False
    assert bookmark.is_read_later is False
    assert bookmark.visit_count == 0
    assert bookmark.created_at is not None


async def test__create_bookmark__appends_to_order(
    db_session: AsyncSession,
    make_bookmark: MakeBookmark,
) -> None:
    await make_bookmark(order_index=7)

    bookmark = await create_bookmark(
        db_session, BookmarkCreate(url='https://example.com/new', title='New'),
    )

    assert bookmark.order_index == 8


async def test__update_bookmark__merges_only_set_fields(
    db_session: AsyncSession,
    make_bookmark: MakeBookmark,
) -> None:
    original = await make_bookmark(title='Before', description='Keep me', category='dev')
    previous_updated_at = original.updated_at

    updated = await update_bookmark(
        db_session, original.id, BookmarkUpdate(title='After', is_pinned=True),
    )

    assert updated is not None
    assert updated.title == 'After'
    assert updated.is_pinned is True
    assert updated.description == 'Keep me'
    assert updated.category == 'dev'
    assert updated.updated_at > previous_updated_at


async def test__update_bookmark__clears_nullable_field(
    db_session: AsyncSession,
    make_bookmark: MakeBookmark,
) -> None:
    original = await make_bookmark(category='dev')

    updated = await update_bookmark(db_session, original.id, BookmarkUpdate(category=None))

    assert updated.category is None


async def test__update_bookmark__not_found(db_session: AsyncSession) -> None:
    assert await update_bookmark(db_session, 'missing', BookmarkUpdate(title='x')) is None


async def test__delete_bookmark__removes_row(
    db_session: AsyncSession,
    make_bookmark: MakeBookmark,
) -> None:
    bookmark = await make_bookmark()

    assert await delete_bookmark(db_session, bookmark.id) is True
    db_session.expunge_all()
    assert await get_bookmark(db_session, bookmark.id) is None


async def test__delete_bookmark__unknown_id_is_noop(db_session: AsyncSession) -> None:
    assert await delete_bookmark(db_session, 'missing') is False


async def test__reorder_bookmarks__sets_indexes_and_ignores_unknown(
    db_session: AsyncSession,
    make_bookmark: MakeBookmark,
) -> None:
    first = await make_bookmark(order_index=0)
    second = await make_bookmark(order_index=1)

    await reorder_bookmarks(
        db_session,
        [
            ReorderItem(id=first.id, order_index=1),
            ReorderItem(id=second.id, order_index=0),
            ReorderItem(id='missing', order_index=5),
        ],
    )

    result = await db_session.execute(
        select(Bookmark.id, Bookmark.order_index).order_by(Bookmark.order_index),
    )
    assert result.all() == [(second.id, 0), (first.id, 1)]


async def test__list_bookmarks__pinned_then_order_then_newest(
    db_session: AsyncSession,
    make_bookmark: MakeBookmark,
) -> None:
    older = await make_bookmark(order_index=0)
    newer = await make_bookmark(order_index=0)
    later = await make_bookmark(order_index=1)
    pinned = await make_bookmark(order_index=9, is_pinned=True)

    bookmarks = await list_bookmarks(db_session)

    assert [b.id for b in bookmarks] == [pinned.id, newer.id, older.id, later.id]


# =============================================================================
# Query builder
# =============================================================================


def test__escape_like__escapes_wildcards() -> None:
    assert escape_like('100%_a\\b') == '100\\%\\_a\\\\b'


@pytest.mark.parametrize(
    ('total', 'page_size', 'page', 'expected_pages', 'expected_has_more'),
    [
        (15, 5, 1, 3, True),
        (15, 5, 3, 3, False),
        (0, 20, 1, 0, False),
        (21, 20, 1, 2, True),
        (15, 5, 100, 3, False),
    ],
)
def test__build_pagination__arithmetic(
    total: int,
    page_size: int,
    page: int,
    expected_pages: int,
    expected_has_more: bool,
) -> None:
    pagination = build_pagination(page, page_size, total)
    assert pagination.total_pages == expected_pages
    assert pagination.has_more is expected_has_more


async def test__search_bookmarks__pages_through_results(
    db_session: AsyncSession,
    make_bookmark: MakeBookmark,
) -> None:
    for index in range(15):
        await make_bookmark(order_index=index)

    seen: list[str] = []
    for page in (1, 2, 3):
        items, pagination = await search_bookmarks(
            db_session, BookmarkQuery(page=page, page_size=5),
        )
        assert len(items) == 5
        assert pagination.total == 15
        assert pagination.total_pages == 3
        assert pagination.has_more is (page < 3)
        seen.extend(b.id for b in items)

    assert len(set(seen)) == 15


async def test__search_bookmarks__page_past_end_is_empty(
    db_session: AsyncSession,
    make_bookmark: MakeBookmark,
) -> None:
    for _ in range(3):
        await make_bookmark()

    items, pagination = await search_bookmarks(db_session, BookmarkQuery(page=100, page_size=5))

    assert items == []
    assert pagination.total == 3
    assert pagination.total_pages == 1
    assert pagination.has_more is False


async def test__search_bookmarks__huge_page_is_empty(
    db_session: AsyncSession,
    make_bookmark: MakeBookmark,
) -> None:
    for _ in range(3):
        await make_bookmark()

    items, pagination = await search_bookmarks(
        db_session, BookmarkQuery(page=10**18, page_size=100),
    )

    assert items == []
    assert pagination.page == 10**18
    assert pagination.total == 3
    assert pagination.total_pages == 1
    assert pagination.has_more is False


async def test__search_bookmarks__clamps_pagination(
    db_session: AsyncSession,
    make_bookmark: MakeBookmark,
) -> None:
    await make_bookmark()

    _, pagination = await search_bookmarks(db_session, BookmarkQuery(page=0, page_size=0))
    assert pagination.page == 1
    assert pagination.page_size == 20

    _, pagination = await search_bookmarks(db_session, BookmarkQuery(page=-3, page_size=500))
    assert pagination.page == 1
    assert pagination.page_size == 100


async def test__search_bookmarks__pinned_first_regardless_of_sort(
    db_session: AsyncSession,
    make_bookmark: MakeBookmark,
) -> None:
    await make_bookmark(title='Alpha')
    pinned = await make_bookmark(title='Zulu', is_pinned=True)
    await make_bookmark(title='Mike')

    for sort_order in ('asc', 'desc'):
        items, _ = await search_bookmarks(
            db_session, BookmarkQuery(sort_by='title', sort_order=sort_order),
        )
        assert items[0].id == pinned.id

    items, _ = await search_bookmarks(db_session, BookmarkQuery(sort_by='title'))
    assert [b.title for b in items] == ['Zulu', 'Alpha', 'Mike']


async def test__search_bookmarks__order_index_ties_newest_first(
    db_session: AsyncSession,
    make_bookmark: MakeBookmark,
) -> None:
    older = await make_bookmark(order_index=0)
    newer = await make_bookmark(order_index=0)

    items, _ = await search_bookmarks(db_session, BookmarkQuery())

    assert [b.id for b in items] == [newer.id, older.id]


async def test__search_bookmarks__sort_by_created_at_desc(
    db_session: AsyncSession,
    make_bookmark: MakeBookmark,
) -> None:
    first = await make_bookmark()
    second = await make_bookmark()
    third = await make_bookmark()

    items, _ = await search_bookmarks(
        db_session, BookmarkQuery(sort_by='createdAt', sort_order='desc'),
    )

    assert [b.id for b in items] == [third.id, second.id, first.id]


async def test__search_bookmarks__search_matches_title_url_description(
    db_session: AsyncSession,
    make_bookmark: MakeBookmark,
) -> None:
    by_title = await make_bookmark(title='Python Docs')
    by_url = await make_bookmark(url='https://python.org')
    by_description = await make_bookmark(description='All about PYTHON')
    await make_bookmark(title='Rust Book', url='https://rust-lang.org')

    items, pagination = await search_bookmarks(db_session, BookmarkQuery(search='python'))

    assert {b.id for b in items} == {by_title.id, by_url.id, by_description.id}
    assert pagination.total == 3


async def test__search_bookmarks__search_wildcards_match_literally(
    db_session: AsyncSession,
    make_bookmark: MakeBookmark,
) -> None:
    percent = await make_bookmark(title='100% coverage')
    await make_bookmark(title='100 percent')

    items, _ = await search_bookmarks(db_session, BookmarkQuery(search='100%'))

    assert [b.id for b in items] == [percent.id]


async def test__search_bookmarks__blank_search_ignored(
    db_session: AsyncSession,
    make_bookmark: MakeBookmark,
) -> None:
    await make_bookmark()
    await make_bookmark()

    _, pagination = await search_bookmarks(db_session, BookmarkQuery(search='   '))

    assert pagination.total == 2


async def test__search_bookmarks__uncategorized_sentinel(
    db_session: AsyncSession,
    make_bookmark: MakeBookmark,
) -> None:
    no_category = await make_bookmark(category=None)
    empty_category = await make_bookmark(category='')
    await make_bookmark(category='dev')
    await make_bookmark(category='uncategorized')

    items, _ = await search_bookmarks(db_session, BookmarkQuery(category='uncategorized'))

    assert {b.id for b in items} == {no_category.id, empty_category.id}


async def test__search_bookmarks__category_exact_match(
    db_session: AsyncSession,
    make_bookmark: MakeBookmark,
) -> None:
    dev = await make_bookmark(category='dev')
    await make_bookmark(category='design')
    await make_bookmark(category=None)

    items, _ = await search_bookmarks(db_session, BookmarkQuery(category='dev'))

    assert [b.id for b in items] == [dev.id]


async def test__search_bookmarks__boolean_filters(
    db_session: AsyncSession,
    make_bookmark: MakeBookmark,
) -> None:
    pinned = await make_bookmark(is_pinned=True)
    read_later = await make_bookmark(is_read_later=True)
    plain = await make_bookmark()

    items, _ = await search_bookmarks(db_session, BookmarkQuery(is_pinned=True))
    assert [b.id for b in items] == [pinned.id]

    items, _ = await search_bookmarks(db_session, BookmarkQuery(is_pinned=False))
    assert {b.id for b in items} == {read_later.id, plain.id}

    items, _ = await search_bookmarks(db_session, BookmarkQuery(is_read_later=True))
    assert [b.id for b in items] == [read_later.id]


async def test__search_bookmarks__filters_combine_with_and(
    db_session: AsyncSession,
    make_bookmark: MakeBookmark,
) -> None:
    match = await make_bookmark(title='Python tips', category='dev', is_read_later=True)
    await make_bookmark(title='Python news', category='dev')
    await make_bookmark(title='Python design', category='design', is_read_later=True)
    await make_bookmark(title='Go tips', category='dev', is_read_later=True)

    items, pagination = await search_bookmarks(
        db_session,
        BookmarkQuery(search='python', category='dev', is_read_later=True),
    )

    assert [b.id for b in items] == [match.id]
    assert pagination.total == 1


async def test__search_bookmarks__total_independent_of_page(
    db_session: AsyncSession,
    make_bookmark: MakeBookmark,
) -> None:
    for _ in range(7):
        await make_bookmark(category='dev')
    await make_bookmark(category='design')

    totals = set()
    for page in (1, 2, 5):
        _, pagination = await search_bookmarks(
            db_session, BookmarkQuery(category='dev', page=page, page_size=3),
        )
        totals.add(pagination.total)

    assert totals == {7}
