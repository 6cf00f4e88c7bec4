import json

import pytest

from codecollab.core.actions import (
    ActionType,
    CreateFile,
    CreateFolder,
    EditFile,
    Summary,
    action_to_dict,
    normalize_action_type,
)
from codecollab.core.decoder import ActionDecoder, decode
from codecollab.core.errors import DecodeError, InvalidActionError, UnknownActionType
from codecollab.core.extractor import ResponseExtractor


WIRE_EXAMPLE = {
    "actions": [
        {"type": "createFolder", "folderName": "NewFolder", "path": "/"},
        {"type": "createFile", "fileName": "NewFile.txt", "content": "...", "path": "/NewFolder"},
        {"type": "editFile", "fileName": "Existing.txt", "content": "..."},
        {"type": "summary", "content": "..."},
    ]
}


def test_decodes_wire_example_in_order():
    actions = decode(json.dumps(WIRE_EXAMPLE))

    assert [a.kind for a in actions] == [
        ActionType.CREATE_FOLDER,
        ActionType.CREATE_FILE,
        ActionType.EDIT_FILE,
        ActionType.SUMMARY,
    ]
    assert actions[0] == CreateFolder(folder_name="NewFolder", path="/", index=0)
    assert actions[1] == CreateFile(file_name="NewFile.txt", content="...", path="/NewFolder", index=1)
    assert actions[2] == EditFile(file_name="Existing.txt", content="...", path=None, index=2)
    assert actions[3] == Summary(content="...", index=3)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("createFile", ActionType.CREATE_FILE),
        ("CreateFile", ActionType.CREATE_FILE),
        ("create_file", ActionType.CREATE_FILE),
        ("create-folder", ActionType.CREATE_FOLDER),
        ("mkdir", ActionType.CREATE_FOLDER),
        ("update_file", ActionType.EDIT_FILE),
        ("SUMMARY", ActionType.SUMMARY),
        ("deleteFile", None),
        ("", None),
        (None, None),
        (42, None),
    ],
)
def test_normalize_action_type(raw, expected):
    assert normalize_action_type(raw) is expected


def test_field_aliases_are_accepted():
    doc = json.dumps({
        "actions": [
            {"type": "create_file", "filename": "a.py", "text": "print(1)", "path": "pkg"},
            {"type": "createFolder", "folder_name": "lib"},
        ]
    })

    actions = decode(doc)

    assert actions[0] == CreateFile(file_name="a.py", content="print(1)", path="pkg", index=0)
    assert actions[1] == CreateFolder(folder_name="lib", index=1)


def test_absent_content_is_empty_string():
    actions = decode('{"actions": [{"type": "createFile", "fileName": "empty.txt", "path": "/"}]}')
    assert actions[0].content == ""


def test_blank_path_is_treated_as_missing():
    actions = decode('{"actions": [{"type": "createFolder", "folderName": "x", "path": "  "}]}')
    assert actions[0].path is None


def test_unknown_type_is_skipped_and_batch_continues():
    doc = json.dumps({
        "actions": [
            {"type": "createFolder", "folderName": "src"},
            {"type": "deleteEverything", "path": "/"},
            {"type": "summary", "content": "done"},
        ]
    })

    batch = ActionDecoder().decode_batch(doc)

    assert [a.index for a in batch.actions] == [0, 2]
    assert len(batch.skipped) == 1
    skipped = batch.skipped[0]
    assert isinstance(skipped, UnknownActionType)
    assert skipped.index == 1
    assert skipped.action_type == "deleteEverything"


@pytest.mark.parametrize(
    "entry",
    [
        {"type": "createFolder"},
        {"type": "createFolder", "folderName": "   "},
        {"type": "createFile", "content": "x"},
        {"type": "editFile", "fileName": "a.txt", "content": 12},
        {"type": "summary"},
        {"type": "createFile", "fileName": "a.txt", "path": 5},
        {"type": "createFile", "fileName": "a\x00b.txt", "path": "/"},
        {"type": "createFolder", "folderName": "src", "path": "/a\x00"},
    ],
)
def test_invalid_entries_are_skipped(entry):
    doc = json.dumps({"actions": [entry, {"type": "summary", "content": "ok"}]})

    batch = ActionDecoder().decode_batch(doc)

    assert len(batch) == 1
    assert isinstance(batch.skipped[0], InvalidActionError)
    assert batch.skipped[0].index == 0


@pytest.mark.parametrize(
    "doc",
    [
        "{not json}",
        '{"steps": []}',
        '{"actions": {"type": "summary"}}',
        '{"actions": ["createFolder"]}',
        '"just a string"',
    ],
)
def test_malformed_documents_raise_decode_error(doc):
    with pytest.raises(DecodeError):
        decode(doc)


def test_bare_action_list_is_accepted():
    actions = decode('[{"type": "summary", "content": "hi"}]')
    assert actions == [Summary(content="hi", index=0)]


def test_xml_variant_has_equivalent_semantics():
    xml = """
    <response>
      <action type="createFolder" folderName="src" path="/" />
      <action type="createFile" path="/src">
        <fileName>index.js</fileName>
        <content><![CDATA[if (a < b) { console.log(1) }]]></content>
      </action>
      <action type="summary">All done</action>
    </response>
    """

    actions = decode(xml)

    assert actions == [
        CreateFolder(folder_name="src", path="/", index=0),
        CreateFile(file_name="index.js", content="if (a < b) { console.log(1) }", path="/src", index=1),
        Summary(content="All done", index=2),
    ]


def test_malformed_xml_raises_decode_error():
    with pytest.raises(DecodeError):
        decode("<response><action type='summary'>oops</response>")


def test_decodes_extracted_document_with_its_format():
    raw = 'Plan:\n```json\n{"actions": [{"type": "summary", "content": "x"}]}\n```'
    document = ResponseExtractor().extract_document(raw)

    batch = ActionDecoder().decode_batch(document)

    assert batch.actions == [Summary(content="x", index=0)]


def test_action_to_dict_uses_wire_names():
    assert action_to_dict(CreateFile(file_name="a.txt", content="x", path="/d")) == {
        "type": "createFile",
        "fileName": "a.txt",
        "content": "x",
        "path": "/d",
    }
    assert action_to_dict(CreateFolder(folder_name="d")) == {"type": "createFolder", "folderName": "d"}
