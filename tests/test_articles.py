"""
Tests for the article catalogue: creation, identity, search and deletion.
"""
import pytest

from help_system.core.exceptions import DuplicateKeyError, InvalidArgumentError, NotFoundError
from help_system.schemas.common import AccessLevel, Level


@pytest.fixture
def articles(service):
    return service.articles


def test_create_assigns_unique_ids(articles):
    created = [articles.create(title=f'A{i}') for i in range(5)]

    ids = {a.unique_id for a in created}
    assert len(ids) == 5
    assert all(articles.exists(uid) for uid in ids)
    assert all(-(2 ** 63) <= uid < 2 ** 63 for uid in ids)


def test_titles_are_not_unique(articles):
    first = articles.create(title='Same')
    second = articles.create(title='Same')

    assert first.id != second.id
    assert len(articles.list_all()) == 2


def test_explicit_unique_id_collision(articles):
    article = articles.create(title='A', unique_id=42)

    assert article.unique_id == 42
    with pytest.raises(DuplicateKeyError):
        articles.create(title='B', unique_id=42)


def test_invalid_level_and_access_level(articles):
    with pytest.raises(InvalidArgumentError):
        articles.create(title='A', level='guru')
    with pytest.raises(InvalidArgumentError):
        articles.create(title='A', access_level='secret')


def test_defaults(articles):
    article = articles.create(title='A')

    assert article.level == Level.BEGINNER
    assert article.access_level == AccessLevel.PUBLIC


def test_search_precision(articles):
    articles.create(title='One', keywords='sorting')
    articles.create(title='Two', keywords='binary search')
    articles.create(title='Three', keywords='searchable')

    assert [a.title for a in articles.search('search')] == ['Two', 'Three']


def test_search_is_case_insensitive_over_title_and_description(articles):
    articles.create(title='Git Basics')
    articles.create(title='Other', description='using GIT remotes')
    articles.create(title='Unrelated')

    assert [a.title for a in articles.search('git')] == ['Git Basics', 'Other']


def test_search_treats_wildcards_literally(articles):
    articles.create(title='100% coverage')
    articles.create(title='1000 coverage')

    assert [a.title for a in articles.search('0%')] == ['100% coverage']


def test_empty_keyword_returns_everything(articles):
    for title in ('A', 'B', 'C'):
        articles.create(title=title)

    assert [a.title for a in articles.search('')] == ['A', 'B', 'C']


def test_zero_matches_is_empty(articles):
    articles.create(title='A')
    assert articles.search('nothing matches') == []


def test_search_filters(articles):
    articles.create(title='A', group_identifier='G', level='expert')
    articles.create(title='B', group_identifier='G')
    articles.create(title='C', group_identifier='H', level='expert')

    assert [a.title for a in articles.search(group='G')] == ['A', 'B']
    assert [a.title for a in articles.search(level='expert')] == ['A', 'C']
    assert [a.title for a in articles.list_by_group('H')] == ['C']


def test_delete_missing_id_returns_false(articles):
    article = articles.create(title='A')

    assert articles.delete(article.id + 100) is False
    assert len(articles.list_all()) == 1
    assert articles.delete(article.id) is True
    assert articles.has_any() is False


def test_delete_all(articles):
    articles.create(title='A')
    articles.create(title='B')

    assert articles.delete_all() == 2
    assert articles.has_any() is False


def test_update(articles):
    article = articles.create(title='A', body='old')

    updated = articles.update(article.id, body='new', level='advanced', title=None)

    assert updated.body == 'new'
    assert updated.level == Level.ADVANCED
    assert updated.title == 'A'
    assert updated.unique_id == article.unique_id


def test_update_rejects_empty_title(articles):
    article = articles.create(title='A')
    with pytest.raises(InvalidArgumentError):
        articles.update(article.id, title='')
    assert articles.get(article.id).title == 'A'


def test_update_unknown_field(articles):
    article = articles.create(title='A')
    with pytest.raises(InvalidArgumentError):
        articles.update(article.id, unique_id=1)


def test_get_missing(articles):
    with pytest.raises(NotFoundError):
        articles.get(999)


def test_exists_title(articles):
    articles.create(title='A')

    assert articles.exists_title('A') is True
    assert articles.exists_title('a') is False
