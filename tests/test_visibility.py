"""
Tests for who may read and change articles and group articles.
"""
import pytest

from help_system.core.exceptions import NotFoundError, PermissionDeniedError
from help_system.schemas.article import ArticleCreate, ArticleUpdate, GroupArticleCreate


def titles(articles):
    return {a.title for a in articles}


@pytest.fixture
def catalogue(service, instructor):
    """T1 public and T2 restricted, both tagged with group G."""
    service.create_group(instructor, 'G')
    t1 = service.create_article(
        instructor, ArticleCreate(title='T1', access_level='public', group_identifier='G')
    )
    t2 = service.create_article(
        instructor, ArticleCreate(title='T2', access_level='restricted', group_identifier='G')
    )
    return t1, t2


class TestArticleVisibility:
    def test_public_versus_restricted(self, service, admin, student, catalogue):
        assert titles(service.search_articles(student)) == {'T1'}

        service.add_group_member(admin, 'G', 'stu', 'student')
        service.grant_group_rights(admin, 'G', 'stu', 'viewing')

        assert titles(service.search_articles(student)) == {'T1', 'T2'}

    def test_group_added_by_plain_manager_calls(self, service, student):
        service.articles.create(title='T1', group_identifier='G')
        service.articles.create(title='T2', group_identifier='G', access_level='restricted')
        assert titles(service.search_articles(student)) == {'T1'}

        service.groups.add_student('stu', 'G')
        service.groups.grant_viewing_rights('stu', 'G')

        assert titles(service.search_articles(student)) == {'T1', 'T2'}

    def test_admins_need_viewing_rights_for_restricted(self, service, admin, catalogue):
        assert titles(service.search_articles(admin)) == {'T1'}

    def test_restricted_in_other_group_stays_hidden(self, service, admin, student, catalogue):
        service.articles.create(title='T3', group_identifier='H', access_level='restricted')
        service.add_group_member(admin, 'G', 'stu', 'student')

        assert titles(service.search_articles(student)) == {'T1', 'T2'}

    def test_every_viewable_group_contributes(self, service, student):
        service.articles.create(title='TG', group_identifier='G', access_level='restricted')
        service.articles.create(title='TH', group_identifier='H', access_level='restricted')
        service.groups.add_first_instructor('ira', 'G')
        service.groups.add_first_instructor('ira', 'H')
        service.groups.add_student('stu', 'G')
        service.groups.add_student('stu', 'H')

        assert titles(service.search_articles(student)) == {'TG', 'TH'}

    def test_granting_rights_never_shrinks_visibility(self, service, admin, student, catalogue):
        before = titles(service.search_articles(student))
        service.add_group_member(admin, 'G', 'stu', 'student')
        middle = titles(service.search_articles(student))
        service.grant_group_rights(admin, 'G', 'stu', 'admin')
        after = titles(service.search_articles(student))

        assert before <= middle <= after

    def test_read_single_article(self, service, student, catalogue):
        t1, t2 = catalogue

        assert service.get_article(student, t1.id).title == 'T1'
        with pytest.raises(PermissionDeniedError):
            service.get_article(student, t2.id)
        with pytest.raises(NotFoundError):
            service.get_article(student, 999)


class TestArticleMutation:
    def test_students_cannot_create(self, service, student):
        with pytest.raises(PermissionDeniedError):
            service.create_article(student, ArticleCreate(title='X'))

    def test_restricted_create_needs_viewing_rights(self, service, instructor):
        with pytest.raises(PermissionDeniedError):
            service.create_article(
                instructor,
                ArticleCreate(title='X', access_level='restricted', group_identifier='H'),
            )

    def test_update_cannot_move_article_out_of_reach(self, service, instructor, catalogue):
        t1, _ = catalogue

        with pytest.raises(PermissionDeniedError):
            service.update_article(
                instructor,
                t1.id,
                ArticleUpdate(access_level='restricted', group_identifier='H'),
            )
        updated = service.update_article(instructor, t1.id, ArticleUpdate(body='new'))
        assert updated.body == 'new'

    def test_delete(self, service, admin, instructor, catalogue):
        _, t2 = catalogue

        with pytest.raises(PermissionDeniedError):
            service.delete_article(admin, t2.id)
        assert service.delete_article(instructor, t2.id) is True
        assert service.delete_article(instructor, t2.id) is False


class TestGroupArticleAccess:
    def test_read_needs_viewing_rights(self, service, admin, instructor, student):
        service.create_group(instructor, 'G')
        article = service.create_group_article(instructor, 'G', GroupArticleCreate(title='Notes'))

        with pytest.raises(PermissionDeniedError):
            service.get_group_article(student, article.id)
        with pytest.raises(PermissionDeniedError):
            service.search_group_articles(student, 'G')

        service.add_group_member(admin, 'G', 'stu', 'student')

        assert service.get_group_article(student, article.id).author == 'ira'
        assert [a.title for a in service.search_group_articles(student, 'G')] == ['Notes']

    def test_write_needs_admin_rights(self, service, admin, instructor, student):
        service.create_group(instructor, 'G')
        article = service.create_group_article(instructor, 'G', GroupArticleCreate(title='Notes'))
        service.add_group_member(admin, 'G', 'stu', 'student')

        with pytest.raises(PermissionDeniedError):
            service.create_group_article(student, 'G', GroupArticleCreate(title='Mine'))
        with pytest.raises(PermissionDeniedError):
            service.update_group_article_body(student, article.id, 'changed')

        service.grant_group_rights(admin, 'G', 'stu', 'admin')

        assert service.update_group_article_body(student, article.id, 'changed').body == 'changed'
        assert service.delete_group_article(student, article.id) is True
        assert service.delete_group_article(student, article.id) is False
