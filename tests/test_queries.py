"""
Tests for student questions and their answers.
"""
import pytest

from help_system.core.exceptions import InvalidArgumentError, NotFoundError, PermissionDeniedError


def test_ask_and_list_unanswered(service, instructor, student):
    query = service.ask(student, 'How do I rebase?')

    assert query.answered is False
    assert [q.id for q in service.unanswered_questions(instructor)] == [query.id]
    assert [q.question for q in service.my_questions(student)] == ['How do I rebase?']


def test_answer_posts_public_query_article(service, instructor, student):
    query = service.ask(student, 'How do I rebase?')

    answered = service.answer_question(instructor, query.id, 'Use git rebase -i.')

    assert answered.answered is True
    assert service.unanswered_questions(instructor) == []
    article = service.get_article(student, answered.answer_article_id)
    assert article.group_identifier == 'Query'
    assert article.body == 'Use git rebase -i.'
    assert [a.id for a in service.search_articles(student, 'rebase')] == [article.id]


def test_answering_twice_keeps_question_answered(service, instructor, student):
    query = service.ask(student, 'Why?')
    service.answer_question(instructor, query.id, 'Because.')

    again = service.answer_question(instructor, query.id, 'Still because.', level='expert')

    assert again.answered is True
    assert len(service.articles.list_by_group('Query')) == 2


def test_only_students_ask(service, instructor):
    with pytest.raises(PermissionDeniedError):
        service.ask(instructor, 'Why?')


def test_students_cannot_answer(service, student):
    query = service.ask(student, 'Why?')
    with pytest.raises(PermissionDeniedError):
        service.answer_question(student, query.id, 'Because.')


def test_empty_question(service, student):
    with pytest.raises(InvalidArgumentError):
        service.ask(student, '   ')


def test_answer_unknown_question(service, instructor):
    with pytest.raises(NotFoundError):
        service.answer_question(instructor, 42, 'Because.')
