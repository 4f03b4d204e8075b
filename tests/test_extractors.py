from jeetable.extractors import (
    EMAIL,
    NAME,
    PHONE,
    extract_filters,
    extract_form_fields,
    extract_search_term,
)


def test_search_term_after_search_for():
    assert extract_search_term("search for wheelchair accessible jobs") == "wheelchair accessible jobs"


def test_search_term_strips_trailing_punctuation():
    assert extract_search_term("find sign language videos.") == "sign language videos"
    assert extract_search_term("Look for remote roles!") == "remote roles"


def test_search_term_missing():
    assert extract_search_term("search") is None
    assert extract_search_term("open jobs") is None


def test_search_term_bare_for_is_not_a_term():
    assert extract_search_term("search for") is None
    assert extract_search_term("look for") is None
    assert extract_search_term("Search for?") is None
    assert extract_search_term("find for.") is None


def test_search_term_keeps_words_starting_with_for():
    assert extract_search_term("search for jobs") == "jobs"
    assert extract_search_term("search forms") == "forms"
    assert extract_search_term("look for forest trails") == "forest trails"


def test_form_fields():
    fields = extract_form_fields("fill name: John Doe, email: john@example.com")
    assert fields == {"name": "John Doe", "email": "john@example.com"}


def test_single_field_extractors():
    assert NAME.extract("my name is not given") == "is not given"
    assert EMAIL.extract("email a@b.co, thanks") == "a@b.co"
    assert PHONE.extract("phone 9876543210") == "9876543210"
    assert PHONE.extract("no number here") is None


def test_name_requires_word_boundary():
    assert NAME.extract("username: bob") is None


def test_form_fields_empty_when_nothing_given():
    assert extract_form_fields("please fill the form") == {}


def test_filters():
    assert extract_filters("show only remote part time jobs") == {"remote": "true", "type": "part-time"}
    assert extract_filters("wheelchair accessible full-time") == {"wheelchair": "true", "type": "full-time"}
    assert extract_filters("filter by salary") == {}
