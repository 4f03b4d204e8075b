from jeetable.language import (
    SUPPORTED_LANGUAGES,
    PhrasebookTranslator,
    normalize,
    normalize_language_code,
)


def test_same_language_is_identity():
    text = "Open the JOBS page, please!"
    assert normalize(text, "en", "en") == text
    assert normalize(text, "hi", "hi") == text


def test_empty_text_passes_through():
    assert normalize("", "hi", "en") == ""


def test_english_to_hindi_substitutes_known_words():
    assert normalize("hello", "en", "hi") == "नमस्ते"
    assert normalize("Thank you", "en", "hi") == "धन्यवाद"


def test_native_to_english_for_classification():
    assert normalize("नौकरी खोलो", "hi", "en") == "jobs open"
    assert normalize("வேலை திற", "ta", "en") == "jobs open"


def test_substitution_is_whole_word_only():
    assert normalize("helpful hints", "en", "hi") == "helpful hints"
    assert normalize("help me", "en", "hi") == "मदद me"


def test_pivot_through_english():
    assert normalize("नमस्ते", "hi", "mr") == "नमस्कार"


def test_unknown_language_passes_text_through():
    assert normalize("bonjour", "fr", "en") == "bonjour"
    assert normalize("hello", "en", "fr") == "hello"


def test_language_codes_are_normalized():
    assert normalize_language_code(" HI ") == "hi"
    assert normalize_language_code(None) == "en"
    assert normalize("hello", "EN", "Hi") == "नमस्ते"


def test_supported_languages():
    assert SUPPORTED_LANGUAGES == ("en", "hi", "mr", "raj", "ta")


def test_custom_phrasebook():
    translator = PhrasebookTranslator({"es": {"open": "abrir", "jobs": "empleos"}})
    assert translator.languages == ("en", "es")
    assert translator.translate("abrir empleos", "es", "en") == "open jobs"
    assert translator.translate("open jobs", "en", "es") == "abrir empleos"
    assert translator.translate("नमस्ते", "hi", "en") == "नमस्ते"
