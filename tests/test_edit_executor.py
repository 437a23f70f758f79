import logging

import pytest

from src.editing.executor import EditIntentExecutor, LineEdit, LineShiftLedger
from src.errors import EditErrorKind, MalformedIntentError
from src.editing.locator import LocatorConfig
from src.models.intent import AppendToSectionIntent, EditTarget, LineRange


PLAN = (
    "# Plan\n"  # 1
    "\n"
    "## Alpha\n"  # 3
    "\n"
    "Alpha body.\n"  # 5
    "\n"
    "## Beta\n"  # 7
    "\n"
    "Beta body.\n"  # 9
    "\n"
    "## Gamma\n"  # 11
    "\n"
    "Gamma body.\n"  # 13
)


def _replace(sid, old, new):
    return {
        "type": "replace_section_content_only",
        "target": {"sid": sid, "targetContent": old},
        "content": new,
        "reason": "refresh wording",
    }


def test_batch_of_sibling_replacements_succeeds():
    response = EditIntentExecutor().execute(
        PLAN,
        [
            _replace("/plan/alpha", "Alpha body.", "Alpha updated."),
            _replace("/plan/beta", "Beta body.", "Beta updated."),
            _replace("/plan/gamma", "Gamma body.", "Gamma updated."),
        ],
    )

    assert response.success is True
    assert response.successful_intents == 3
    assert response.failed_intents == []
    assert [applied.execution_order for applied in response.applied_intents] == [1, 2, 3]
    assert response.text == PLAN.replace("body.", "updated.")

    payload = response.to_payload()
    assert payload["success"] is True
    assert payload["successfulIntents"] == 3
    assert payload["failedIntents"] == []
    assert "text" not in payload
    assert payload["metadata"]["documentLength"] == len(response.text)


def test_partial_failure_reports_bad_intent_and_applies_the_rest(caplog):
    bad = _replace("/plan/missing", "Anything", "Nope")
    with caplog.at_level(logging.WARNING):
        response = EditIntentExecutor().execute(
            PLAN,
            [
                _replace("/plan/alpha", "Alpha body.", "Alpha updated."),
                bad,
                _replace("/plan/gamma", "Gamma body.", "Gamma updated."),
            ],
        )

    assert response.success is False
    assert response.successful_intents == 2
    assert len(response.failed_intents) == 1
    failure = response.failed_intents[0]
    assert failure.intent == bad
    assert failure.error.kind == EditErrorKind.SECTION_NOT_FOUND
    assert "/plan/alpha" in failure.error.suggestions["available_sids"]
    assert "Alpha updated." in response.text
    assert "Gamma updated." in response.text
    assert response.to_payload()["failedIntents"][0]["error"]["kind"] == "SectionNotFound"
    assert "SectionNotFound" in caplog.text


def test_delete_preserves_heading():
    response = EditIntentExecutor().execute(
        PLAN,
        [{"type": "delete_section_content_only", "target": {"sid": "/plan/beta"}}],
    )

    assert response.success
    assert "Beta body." not in response.text
    assert "## Beta\n\n## Gamma\n" in response.text
    assert response.text.count("## ") == 3


def test_delete_keeps_subsections():
    text = "# Guide\n\n## Setup\n\nInstall it.\n\n### Details\n\nMore.\n"
    response = EditIntentExecutor().execute(
        text,
        [{"type": "delete_section_content_only", "target": {"sid": "/guide/setup"}}],
    )

    assert response.text == "# Guide\n\n## Setup\n\n### Details\n\nMore.\n"


def test_delete_content_to_remove_drops_emptied_line():
    response = EditIntentExecutor().execute(
        PLAN,
        [
            {
                "type": "delete_section_content_only",
                "target": {"sid": "/plan/gamma", "contentToRemove": "Gamma body."},
            }
        ],
    )

    assert response.success
    assert response.text.endswith("## Gamma\n\n")


def test_inline_delete_keeps_rest_of_line():
    response = EditIntentExecutor().execute(
        PLAN,
        [{"type": "delete_section_content_only", "target": {"sid": "/plan/alpha", "targetContent": " body"}}],
    )

    assert "\nAlpha.\n" in response.text


def test_append_and_prepend():
    response = EditIntentExecutor().execute(
        PLAN,
        [
            {"type": "append_to_section", "target": {"sid": "/plan/alpha"}, "content": "Appended."},
            {"type": "prepend_to_section", "target": {"sid": "/plan/beta"}, "content": "First.\n"},
        ],
    )

    assert response.success
    assert "Alpha body.\nAppended.\n\n## Beta\nFirst.\n\nBeta body." in response.text


def test_insert_before_and_after_sections():
    response = EditIntentExecutor().execute(
        PLAN,
        [
            {
                "type": "insert_section_content_only",
                "target": {"sid": "/plan/beta", "insertionPosition": "before"},
                "content": "## Intro\n\nHello.\n\n",
            },
            {
                "type": "insert_section_content_only",
                "target": {"sid": "/plan/gamma", "insertionPosition": "after"},
                "content": "## Appendix\n",
            },
        ],
    )

    assert response.success
    assert "## Intro\n\nHello.\n\n## Beta" in response.text
    assert response.text.endswith("Gamma body.\n## Appendix\n")


def test_insert_after_content():
    response = EditIntentExecutor().execute(
        PLAN,
        [
            {
                "type": "insert_section_content_only",
                "target": {"sid": "/plan/alpha", "afterContent": "alpha body"},
                "content": "Extra line.",
            }
        ],
    )

    assert "Alpha body.\nExtra line.\n\n## Beta" in response.text


def test_intents_see_results_of_earlier_intents():
    response = EditIntentExecutor().execute(
        PLAN,
        [
            _replace("/plan/alpha", "Alpha body.", "Alpha body.\n\n### Notes"),
            {"type": "append_to_section", "target": {"sid": "/plan/alpha/notes"}, "content": "Note text."},
        ],
    )

    assert response.success, response.failed_intents
    assert "### Notes\nNote text.\n" in response.text


def test_line_ranges_refer_to_submitted_document():
    response = EditIntentExecutor().execute(
        PLAN,
        [
            {
                "type": "insert_section_content_only",
                "target": {"sid": "/plan/alpha", "afterContent": "Alpha body."},
                "content": "Extra line.\n",
            },
            {
                "type": "replace_section_content_only",
                "target": {"sid": "/plan/gamma", "lineRange": {"startLine": 13, "endLine": 13}},
                "content": "Gamma rewritten.\n",
            },
        ],
    )

    assert response.success, response.failed_intents
    assert "Gamma body." not in response.text
    assert response.text.endswith("## Gamma\n\nGamma rewritten.\n")
    second = response.applied_intents[1]
    assert second.adjusted_line_range == LineRange(start_line=14, end_line=14)
    assert response.applied_intents[0].adjusted_line_range is None


def test_line_range_over_rewritten_lines_is_rejected():
    response = EditIntentExecutor().execute(
        PLAN,
        [
            {
                "type": "replace_section_content_only",
                "target": {"sid": "/plan/alpha", "lineRange": {"startLine": 5, "endLine": 5}},
                "content": "New alpha.\n",
            },
            {
                "type": "delete_section_content_only",
                "target": {"sid": "/plan/alpha", "lineRange": {"startLine": 5, "endLine": 5}},
            },
        ],
    )

    assert response.successful_intents == 1
    assert response.failed_intents[0].error.kind == EditErrorKind.MALFORMED_INTENT
    assert "New alpha." in response.text


@pytest.mark.parametrize(
    "raw",
    [
        {"type": "replace_section_content_only", "target": {"sid": "/plan/alpha"}, "content": "x"},
        {"type": "replace_section_content_only", "target": {"sid": "/plan/alpha", "lineRange": {"startLine": 5}}, "content": "x"},
        {"type": "insert_section_content_only", "target": {"sid": "/plan/alpha"}, "content": "x"},
        {"type": "append_to_section", "target": {"sid": "/plan/alpha"}},
        {"type": "rename_section", "target": {"sid": "/plan/alpha"}},
        {"target": {"sid": "/plan/alpha"}},
        "not an intent",
    ],
)
def test_malformed_intents_fail_individually(raw):
    response = EditIntentExecutor().execute(
        PLAN,
        [raw, {"type": "append_to_section", "target": {"sid": "/plan/gamma"}, "content": "Tail."}],
    )

    assert response.success is False
    assert response.successful_intents == 1
    assert response.failed_intents[0].error.kind == EditErrorKind.MALFORMED_INTENT
    assert response.failed_intents[0].intent == raw
    assert response.text.endswith("Gamma body.\nTail.\n")


def test_invalid_sid_is_rejected_before_search():
    response = EditIntentExecutor().execute(
        PLAN,
        [{"type": "append_to_section", "target": {"sid": "Plan/Alpha"}, "content": "x"}],
    )

    error = response.failed_intents[0].error
    assert error.kind == EditErrorKind.INVALID_SID
    assert error.suggestions["corrected_sid"] == "/plan/alpha"
    assert response.text == PLAN


def test_content_not_found_leaves_text_untouched():
    response = EditIntentExecutor().execute(PLAN, [_replace("/plan/beta", "Alpha body.", "x")])

    assert response.failed_intents[0].error.kind == EditErrorKind.CONTENT_NOT_FOUND
    assert response.text == PLAN


def test_strict_matching_reports_ambiguity():
    text = "# A\n\nsame\nsame\n"
    executor = EditIntentExecutor(locator_config=LocatorConfig(strict_matching=True))

    response = executor.execute(text, [_replace("/a", "same", "other")])
    assert response.failed_intents[0].error.kind == EditErrorKind.AMBIGUOUS_TARGET

    relaxed = EditIntentExecutor().execute(text, [_replace("/a", "same", "other")])
    assert relaxed.text == "# A\n\nother\nsame\n"


def test_validate_only_locates_without_applying():
    intent = AppendToSectionIntent(
        type="append_to_section",
        target=EditTarget(sid="/plan/beta"),
        content="Never written.",
        validate_only=True,
    )
    response = EditIntentExecutor().execute(PLAN, [intent])

    assert response.success
    assert response.applied_intents[0].validated_only is True
    assert response.text == PLAN


def test_empty_batch_and_document_without_trailing_newline():
    assert EditIntentExecutor().execute(PLAN, []).success is True

    response = EditIntentExecutor().execute(
        "# A\nText",
        [{"type": "append_to_section", "target": {"sid": "/a"}, "content": "More"}],
    )
    assert response.text == "# A\nText\nMore"


def test_ledger_translates_through_recorded_edits():
    ledger = LineShiftLedger()
    ledger.record(LineEdit(first_line=5, last_line=4, delta=2))
    ledger.record(LineEdit(first_line=10, last_line=11, delta=-1))

    assert ledger.translate_line(3) == 3
    assert ledger.translate_line(7) == 9
    assert ledger.translate_line(12) == 13
    with pytest.raises(MalformedIntentError):
        ledger.translate_line(9)


def test_inline_edits_keep_line_numbers_valid():
    ledger = LineShiftLedger()
    ledger.record(LineEdit(first_line=4, last_line=4, delta=0, inline=True))

    assert ledger.translate(LineRange(start_line=5, end_line=6)) == LineRange(start_line=5, end_line=6)


def test_crlf_document_keeps_its_line_endings():
    text = "# A\r\nbody\r\n# B\r\nb\r\n"
    executor = EditIntentExecutor()

    prepended = executor.execute(
        text, [{"type": "prepend_to_section", "target": {"sid": "/a"}, "content": "NEW"}]
    )
    assert prepended.text == "# A\r\nNEW\r\nbody\r\n# B\r\nb\r\n"

    replaced = executor.execute(text, [_replace("/b", "b", "one\r\ntwo")])
    assert replaced.text == "# A\r\nbody\r\n# B\r\none\r\ntwo\r\n"


def test_inline_replacement_ending_in_newline_does_not_add_blank_line():
    response = EditIntentExecutor().execute("# A\n\nfoo bar\n", [_replace("/a", "foo bar", "baz\n")])

    assert response.text == "# A\n\nbaz\n"

    mid_line = EditIntentExecutor().execute("# A\n\nfoo bar\n", [_replace("/a", "foo", "baz\n")])
    assert mid_line.text == "# A\n\nbaz\n bar\n"


def test_setext_sections_keep_their_underline_on_edit():
    text = "Title\n=====\n\nIntro.\n\nSub\n---\n\nBody.\n"
    response = EditIntentExecutor().execute(
        text,
        [
            {"type": "prepend_to_section", "target": {"sid": "/title"}, "content": "Lead."},
            {"type": "delete_section_content_only", "target": {"sid": "/title/sub"}},
        ],
    )

    assert response.success, response.failed_intents
    assert response.text == "Title\n=====\nLead.\n\nIntro.\n\nSub\n---\n"
