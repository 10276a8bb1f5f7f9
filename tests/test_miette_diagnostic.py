import json

import pytest

from diagnostica.miette_diagnostic import MietteDiagnostic
from diagnostica.protocol import Diagnostic, LabeledSpan, Severity, SourceSpan, to_diagnostic


def _full_diagnostic():
    return (
        MietteDiagnostic("message")
        .with_code("code")
        .with_help("help")
        .with_url("url")
        .with_labels([LabeledSpan.at_offset(0, "label1"), LabeledSpan.at(range(1, 3), "label2")])
        .with_severity(Severity.WARNING)
    )


FULL_JSON = {
    "message": "message",
    "code": "code",
    "help": "help",
    "url": "url",
    "severity": "Warning",
    "labels": [
        {"span": {"offset": 0, "length": 0}, "label": "label1", "primary": False},
        {"span": {"offset": 1, "length": 2}, "label": "label2", "primary": False},
    ],
}


def test_new_sets_message_and_display():
    diag = MietteDiagnostic("Oops, something went wrong!")
    assert str(diag) == "Oops, something went wrong!"
    assert diag.message == "Oops, something went wrong!"
    assert diag.code() is None
    assert diag.severity() is None
    assert diag.help() is None
    assert diag.url() is None
    assert diag.labels() is None


def test_with_code():
    diag = MietteDiagnostic("Oops, something went wrong!").with_code("foo::bar::baz")
    assert diag.message == "Oops, something went wrong!"
    assert diag.code() == "foo::bar::baz"


def test_with_severity():
    diag = MietteDiagnostic("I warn you to stop!").with_severity(Severity.WARNING)
    assert diag.message == "I warn you to stop!"
    assert diag.severity() == Severity.WARNING


def test_with_help():
    diag = MietteDiagnostic("PC is not working").with_help("Try to reboot it again")
    assert diag.message == "PC is not working"
    assert diag.help() == "Try to reboot it again"


def test_with_url():
    diag = MietteDiagnostic("PC is not working").with_url("https://example.com/?q=why")
    assert diag.message == "PC is not working"
    assert diag.url() == "https://example.com/?q=why"


def test_with_label():
    label = LabeledSpan.at(range(0, 3), "This should be Rust")
    diag = MietteDiagnostic("Wrong best language").with_label(label)
    assert diag.message == "Wrong best language"
    assert list(diag.labels()) == [label]


def test_with_label_discards_previous():
    first = LabeledSpan.at_offset(1, "first")
    second = LabeledSpan.at_offset(2, "second")
    diag = MietteDiagnostic("m").with_label(first).with_label(second)
    assert list(diag.labels()) == [second]


def test_with_labels():
    labels = [LabeledSpan.at_offset(3, "add 'l'"), LabeledSpan.at_offset(6, "add 'r'")]
    diag = MietteDiagnostic("Typos in 'hello world'").with_labels(labels)
    assert diag.message == "Typos in 'hello world'"
    assert list(diag.labels()) == labels


def test_and_label():
    label1 = LabeledSpan.at_offset(3, "add 'l'")
    label2 = LabeledSpan.at_offset(6, "add 'r'")
    diag = MietteDiagnostic("Typos in 'hello world'").and_label(label1).and_label(label2)
    assert diag.message == "Typos in 'hello world'"
    assert list(diag.labels()) == [label1, label2]


def test_and_labels():
    label1 = LabeledSpan.at_offset(3, "add 'l'")
    label2 = LabeledSpan.at_offset(6, "add 'r'")
    label3 = LabeledSpan.at_offset(9, "add '!'")
    diag = MietteDiagnostic("Typos in 'hello world!'").and_label(label1).and_labels([label2, label3])
    assert diag.message == "Typos in 'hello world!'"
    assert list(diag.labels()) == [label1, label2, label3]


def test_builders_leave_original_unchanged():
    base = MietteDiagnostic("m")
    derived = base.with_code("c").and_label(LabeledSpan.at_offset(0, "x"))
    assert base.code() is None
    assert base.labels() is None
    assert derived.code() == "c"


def test_with_label_rejects_non_label():
    with pytest.raises(TypeError):
        MietteDiagnostic("m").with_label((0, 1))


def test_is_raisable_diagnostic():
    diag = MietteDiagnostic("boom").with_code("E1")
    with pytest.raises(MietteDiagnostic) as info:
        raise diag
    assert info.value.code() == "E1"
    assert isinstance(info.value, Diagnostic)
    assert to_diagnostic(diag) is diag


def test_equality():
    assert _full_diagnostic() == _full_diagnostic()
    assert MietteDiagnostic("a") != MietteDiagnostic("b")
    assert MietteDiagnostic("a").with_help("h") != MietteDiagnostic("a")


def test_serialize_minimal():
    assert MietteDiagnostic("message").to_json() == {"message": "message"}


def test_serialize_full():
    assert _full_diagnostic().to_json() == FULL_JSON


def test_deserialize_minimal():
    assert MietteDiagnostic.from_json({"message": "message"}) == MietteDiagnostic("message")


def test_deserialize_nulls():
    value = {
        "message": "message",
        "help": None,
        "code": None,
        "severity": None,
        "url": None,
        "labels": None,
    }
    assert MietteDiagnostic.from_json(value) == MietteDiagnostic("message")


def test_deserialize_full():
    assert MietteDiagnostic.from_json(FULL_JSON) == _full_diagnostic()


def test_json_text_round_trip():
    text = json.dumps(_full_diagnostic().to_json())
    assert MietteDiagnostic.from_json(json.loads(text)) == _full_diagnostic()


def test_deserialized_label_spans():
    diag = MietteDiagnostic.from_json(FULL_JSON)
    spans = [label.span for label in diag.labels()]
    assert spans == [SourceSpan(0, 0), SourceSpan(1, 2)]


@pytest.mark.parametrize(
    "value",
    [
        {},
        {"message": 3},
        "message",
        {"message": "m", "severity": "Fatal"},
        {"message": "m", "labels": "nope"},
        {"message": "m", "code": 5},
    ],
)
def test_deserialize_invalid(value):
    with pytest.raises(ValueError):
        MietteDiagnostic.from_json(value)