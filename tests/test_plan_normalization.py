"""Tests for categorization response normalization."""

from __future__ import annotations

import pytest

from foldsort.planning import (
    ParseError,
    Plan,
    PlanCategory,
    PlanItem,
    normalize_plan_payload,
    parse_plan_response,
    strip_code_fence,
)
from foldsort.scanning import EntryKind

LEGACY_FILES = '{"Images": {"files": ["a.png"]}}'
OBJECT_ITEMS = '{"Images": {"items": [{"name": "a.png", "type": "file"}]}}'


@pytest.mark.parametrize(
    "text",
    [
        LEGACY_FILES,
        OBJECT_ITEMS,
        f"```json\n{OBJECT_ITEMS}\n```",
        f"```\n{LEGACY_FILES}\n```",
        f"  ```json{OBJECT_ITEMS}```  ",
    ],
)
def test_response_shapes_normalize_to_the_same_plan(text: str) -> None:
    plan = parse_plan_response(text)

    assert plan == Plan(
        categories=[
            PlanCategory(name="Images", items=[PlanItem(name="a.png", kind=EntryKind.FILE)])
        ]
    )


def test_folder_items_and_reasons_are_kept() -> None:
    plan = parse_plan_response(
        '{"Projects": {"reason": "Code", "items": ['
        '{"name": "MyApp", "type": "folder"}, {"name": "tool", "kind": "Directory"}]}}'
    )

    category = plan.get("Projects")
    assert category is not None
    assert category.reason == "Code"
    assert [(item.name, item.kind) for item in category.items] == [
        ("MyApp", EntryKind.FOLDER),
        ("tool", EntryKind.FOLDER),
    ]


def test_category_order_follows_document() -> None:
    plan = parse_plan_response('{"Misc": {"items": []}, "Archives": {"items": []}}')

    assert [category.name for category in plan.categories] == ["Misc", "Archives"]


def test_empty_document_is_empty_plan() -> None:
    plan = parse_plan_response("{}")

    assert plan.is_empty
    assert plan.item_count == 0


def test_missing_item_list_means_no_items() -> None:
    plan = parse_plan_response('{"Docs": {"reason": "nothing yet"}}')

    assert plan.categories[0].items == []


def test_malformed_json_raises_parse_error() -> None:
    with pytest.raises(ParseError) as excinfo:
        parse_plan_response('{"Images": {"files": ["a.png"]')

    assert excinfo.value.raw_response is None


def test_raw_response_kept_on_request() -> None:
    with pytest.raises(ParseError) as excinfo:
        parse_plan_response("Sure! Here is your plan.", keep_raw=True)

    assert excinfo.value.raw_response == "Sure! Here is your plan."


@pytest.mark.parametrize(
    "text",
    [
        '["Images"]',
        '{"Images": ["a.png"]}',
        '{"Images": {"items": "a.png"}}',
        '{"Images": {"items": [42]}}',
        '{"../outside": {"items": ["a.png"]}}',
        '{"/abs": {"items": ["a.png"]}}',
        '{"Images": {"items": ["nested/a.png"]}}',
        '{"Images": {"items": [".."]}}',
    ],
)
def test_invalid_documents_raise_parse_error(text: str) -> None:
    with pytest.raises(ParseError):
        parse_plan_response(text)


def test_nested_category_names_are_allowed() -> None:
    plan = normalize_plan_payload({"Projects/Node.js": {"items": ["app"]}})

    assert plan.categories[0].relative_path.parts == ("Projects", "Node.js")


def test_to_mapping_matches_document_shape() -> None:
    plan = parse_plan_response(
        '{"Projects": {"reason": "Code", "items": [{"name": "MyApp", "type": "folder"}]},'
        ' "Misc": {"files": ["notes.txt"]}}'
    )

    assert plan.to_mapping() == {
        "Projects": {"reason": "Code", "items": [{"name": "MyApp", "type": "folder"}]},
        "Misc": {"reason": None, "items": [{"name": "notes.txt", "type": "file"}]},
    }
    assert normalize_plan_payload(plan.to_mapping()) == plan


def test_duplicate_category_names_rejected() -> None:
    with pytest.raises(ValueError):
        Plan(categories=[PlanCategory(name="Misc"), PlanCategory(name="Misc")])


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ('```json\n{"a": 1}\n```', '{"a": 1}'),
        ('```\n{"a": 1}\n```', '{"a": 1}'),
        ('{"a": 1}', '{"a": 1}'),
        ('\n\n```JSON\n{}\n```\n', "{}"),
    ],
)
def test_strip_code_fence(text: str, expected: str) -> None:
    assert strip_code_fence(text) == expected
