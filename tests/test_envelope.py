from muweb.envelope import Page, failure, ok, total_pages


def test_ok_omits_empty_keys():
    assert ok([1]) == {"success": True, "data": [1]}
    assert ok(message="done") == {"success": True, "data": None, "message": "done"}


def test_failure():
    assert failure("nope") == {"success": False, "error": "nope"}


def test_total_pages():
    assert total_pages(21, 10) == 3
    assert total_pages(20, 10) == 2
    assert total_pages(0, 10) == 0


def test_page_clamps():
    page = Page(page=0, limit=500)

    assert (page.page, page.limit, page.offset) == (1, 100, 0)
    assert Page(page=3, limit=20).offset == 40
