"""Pagination helpers — 1-based pages over offset/limit."""

from learnhub.core.pagination import page_offset, total_pages


def test_page_offset():
    assert page_offset(1, 20) == 0
    assert page_offset(3, 10) == 20


def test_page_offset_clamps_to_first_page():
    assert page_offset(0, 10) == 0
    assert page_offset(-2, 10) == 0


def test_total_pages_rounds_up():
    assert total_pages(0, 10) == 0
    assert total_pages(10, 10) == 1
    assert total_pages(11, 10) == 2
    assert total_pages(5, 0) == 0
