from __future__ import annotations

import json
import xml.etree.ElementTree as ET

from src.xero_sync.models.accounting import TRACKING_CATEGORY, TRACKING_OPTION
from src.xero_sync.models.files import ASSOCIATION, FILE
from src.xero_sync.remote.descriptor import (
    API_FILE,
    METHOD_GET,
    METHOD_POST,
    METHOD_PUT,
    PropertyMeta,
    PropertyType,
    ResourceDescriptor,
)
from src.xero_sync.remote.model import Model


def _category(guid: str = "tc-1") -> Model:
    category = Model(TRACKING_CATEGORY)
    category.from_string_array({"TrackingCategoryID": guid, "Name": "Region"})
    return category


def test_options_are_saved_as_one_xml_batch_under_the_parent(app, http, envelope) -> None:
    http.queue_xml(
        envelope(
            "Options",
            "<Option><TrackingOptionID>o-1</TrackingOptionID><Name>North</Name></Option>"
            "<Option><TrackingOptionID>o-2</TrackingOptionID><Name>South</Name></Option>",
        )
    )
    category = _category()
    north = Model(TRACKING_OPTION, {"Name": "North"})
    south = Model(TRACKING_OPTION, {"Name": "South"})
    category.set("Options", [north, south])

    # only the relationship is dirty, so the parent itself is not sent
    assert app.save(category) is None

    assert len(http.calls) == 1
    call = http.last
    assert call.method == "PUT"
    assert call.url == "https://api.xero.com/api.xro/2.0/TrackingCategories/tc-1/Options"
    root = ET.fromstring(call.body)
    assert root.tag == "Options"
    assert [node.find("Name").text for node in root] == ["North", "South"]

    assert (north.guid, south.guid) == ("o-1", "o-2")
    assert not north.is_dirty() and not south.is_dirty()
    assert not category.is_dirty("Options")
    assert category.relationship_errors == {"Options": {}}


def test_relationship_failures_are_recorded_and_parent_property_still_cleaned(
    app, http, envelope
) -> None:
    http.queue_xml(
        envelope(
            "Options",
            "<Option><TrackingOptionID>o-1</TrackingOptionID><Name>North</Name></Option>"
            '<Option status="ERROR"><Name>North</Name><ValidationErrors><ValidationError>'
            "<Message>Option name must be unique</Message></ValidationError></ValidationErrors>"
            "</Option>",
        )
    )
    category = _category()
    first = Model(TRACKING_OPTION, {"Name": "North"})
    duplicate = Model(TRACKING_OPTION, {"Name": "North"})
    category.add_to("Options", first).add_to("Options", duplicate)

    app.save_relationships(category)

    assert not category.is_dirty("Options")
    assert category.relationship_errors["Options"] == {1: ["Option name must be unique"]}
    assert first.guid == "o-1"
    assert duplicate.guid is None
    assert duplicate.is_dirty("Name")


def test_new_parent_saves_relationships_after_it_gets_a_guid(app, http, envelope) -> None:
    http.queue_xml(
        envelope(
            "TrackingCategories",
            "<TrackingCategory><TrackingCategoryID>tc-9</TrackingCategoryID>"
            "<Name>Region</Name></TrackingCategory>",
        )
    )
    http.queue_xml(
        envelope("Options", "<Option><TrackingOptionID>o-1</TrackingOptionID></Option>")
    )
    option = Model(TRACKING_OPTION, {"Name": "North"})
    category = Model(TRACKING_CATEGORY, {"Name": "Region", "Options": [option]})

    app.save(category)

    create, options = http.calls
    assert create.method == "PUT"
    assert create.url.endswith("/api.xro/2.0/TrackingCategories")
    body = ET.fromstring(create.body)
    assert body.tag == "TrackingCategory"
    assert body.find("Options") is None

    assert options.method == "PUT"
    assert options.url.endswith("/TrackingCategories/tc-9/Options")
    assert option.guid == "o-1"
    assert not category.is_dirty()


def test_pending_relationships_survive_an_empty_echo_in_the_create_response(
    app, http, envelope
) -> None:
    http.queue_xml(
        envelope(
            "TrackingCategories",
            "<TrackingCategory><TrackingCategoryID>tc-9</TrackingCategoryID>"
            "<Name>Region</Name><Options /></TrackingCategory>",
        )
    )
    http.queue_xml(
        envelope("Options", "<Option><TrackingOptionID>o-1</TrackingOptionID></Option>")
    )
    option = Model(TRACKING_OPTION, {"Name": "North"})
    category = Model(TRACKING_CATEGORY, {"Name": "Region", "Options": [option]})

    app.save(category)

    assert [call.method for call in http.calls] == ["PUT", "PUT"]
    assert http.last.url.endswith("/TrackingCategories/tc-9/Options")
    assert ET.fromstring(http.last.body).find("Option/Name").text == "North"
    assert category.get("Options") == [option]
    assert option.guid == "o-1"
    assert not category.is_dirty()


def test_flat_json_associations_are_posted_one_request_per_item(app, http) -> None:
    http.queue_json({"FileId": "f-1", "ObjectId": "inv-1", "ObjectGroup": "Invoice"})
    http.queue_json({"FileId": "f-1", "ObjectId": "inv-2", "ObjectGroup": "Invoice"})
    file = Model(FILE)
    file.from_string_array({"Id": "f-1", "Name": "scan.pdf"})
    first = Model(ASSOCIATION, {"ObjectId": "inv-1"})
    second = Model(ASSOCIATION, {"ObjectId": "inv-2"})
    file.set("Associations", [first, second])

    app.save_relationships(file)

    assert [call.method for call in http.calls] == ["POST", "POST"]
    assert {call.url for call in http.calls} == {
        "https://api.xero.com/files.xro/1.0/Files/f-1/Associations"
    }
    assert [json.loads(call.body) for call in http.calls] == [
        {"ObjectId": "inv-1"},
        {"ObjectId": "inv-2"},
    ]
    assert http.calls[0].headers["Content-Type"] == "application/json"
    # each response lands on its own item
    assert first.get("ObjectGroup") == "Invoice"
    assert first.get("FileId") == "f-1"
    assert second.get("ObjectId") == "inv-2"
    assert not first.is_dirty() and not second.is_dirty()
    assert not file.is_dirty("Associations")


def test_flat_json_per_item_errors_are_indexed_by_position(app, http) -> None:
    http.queue_json({"FileId": "f-1", "ObjectId": "inv-1"})
    http.queue_json({"ObjectId": "bogus", "ValidationErrors": [{"Message": "Unknown object"}]})
    file = Model(FILE)
    file.from_string_array({"Id": "f-1"})
    good = Model(ASSOCIATION, {"ObjectId": "inv-1"})
    bad = Model(ASSOCIATION, {"ObjectId": "bogus"})
    file.set("Associations", [good, bad])

    app.save_relationships(file)

    assert file.relationship_errors["Associations"] == {1: ["Unknown object"]}
    assert not good.is_dirty()
    assert bad.is_dirty("ObjectId")
    assert not file.is_dirty("Associations")


def test_single_flat_json_item_is_one_request(app, http) -> None:
    http.queue_json({"FileId": "f-1", "ObjectId": "inv-1", "ObjectType": "ACCREC"})
    file = Model(FILE)
    file.from_string_array({"Id": "f-1"})
    association = Model(ASSOCIATION, {"ObjectId": "inv-1"})
    file.add_to("Associations", association)

    app.save_relationships(file)

    assert len(http.calls) == 1
    assert association.get("ObjectType") == "ACCREC"
    assert not association.is_dirty()


ATTACHMENT = ResourceDescriptor(
    name="Attachment",
    resource_uri="Attachments",
    root_node_name="",
    guid_property="AttachmentID",
    supported_methods=frozenset({METHOD_GET, METHOD_PUT}),
    properties=(
        PropertyMeta("AttachmentID"),
        PropertyMeta("FileName"),
        PropertyMeta("ContentLength", PropertyType.INT, read_only=True),
    ),
)

RECEIPT = ResourceDescriptor(
    name="Receipt",
    resource_uri="Receipts",
    root_node_name="Receipt",
    guid_property="ReceiptID",
    supported_methods=frozenset({METHOD_GET, METHOD_PUT, METHOD_POST}),
    properties=(
        PropertyMeta("ReceiptID"),
        PropertyMeta("Reference"),
        PropertyMeta("Attachment", PropertyType.OBJECT, related=ATTACHMENT, save_directly=True),
    ),
)


def test_single_related_object_is_folded_through_typed_setters(app, http) -> None:
    http.queue_json(
        {"AttachmentID": "a-1", "FileName": "scan.pdf", "ContentLength": "2048", "Url": "ignored"}
    )
    receipt = Model(RECEIPT)
    receipt.from_string_array({"ReceiptID": "r-1"})
    attachment = Model(ATTACHMENT, {"FileName": "scan.pdf"})
    receipt.set("Attachment", attachment)

    app.save(receipt)

    call = http.last
    assert call.method == "PUT"
    assert call.url == "https://api.xero.com/api.xro/2.0/Receipts/r-1/Attachments"
    assert json.loads(call.body) == {"FileName": "scan.pdf"}
    assert attachment.guid == "a-1"
    assert attachment.get("ContentLength") == 2048
    assert not attachment.is_dirty()
    assert not receipt.is_dirty()
    assert receipt.relationship_errors == {"Attachment": {}}




TAG = ResourceDescriptor(
    name="Tag",
    resource_uri="Tags",
    root_node_name="",
    guid_property="TagId",
    api_stem=API_FILE,
    supported_methods=frozenset({METHOD_GET, METHOD_POST}),
    create_method=METHOD_POST,
    properties=(PropertyMeta("TagId"), PropertyMeta("Label")),
)

TAGGED_FILE = ResourceDescriptor(
    name="TaggedFile",
    resource_uri="Files",
    root_node_name="",
    guid_property="Id",
    api_stem=API_FILE,
    supported_methods=frozenset({METHOD_GET, METHOD_PUT}),
    create_method=METHOD_POST,
    properties=(
        PropertyMeta("Id"),
        PropertyMeta(
            "Associations",
            PropertyType.OBJECT,
            related=ASSOCIATION,
            is_array=True,
            save_directly=True,
        ),
        PropertyMeta("Tags", PropertyType.OBJECT, related=TAG, is_array=True, save_directly=True),
    ),
)


def test_per_item_flat_json_path_continues_with_later_properties(app, http) -> None:
    http.queue_json({"FileId": "f-1", "ObjectId": "inv-1"})
    http.queue_json({"FileId": "f-1", "ObjectId": "inv-2"})
    http.queue_json({"TagId": "t-1", "Label": "receipts"})
    file = Model(TAGGED_FILE)
    file.from_string_array({"Id": "f-1"})
    file.set(
        "Associations",
        [Model(ASSOCIATION, {"ObjectId": "inv-1"}), Model(ASSOCIATION, {"ObjectId": "inv-2"})],
    )
    tag = Model(TAG, {"Label": "receipts"})
    file.add_to("Tags", tag)

    app.save_relationships(file)

    assert [call.url.rsplit("/", 1)[-1] for call in http.calls] == [
        "Associations",
        "Associations",
        "Tags",
    ]
    assert tag.guid == "t-1"
    assert not file.is_dirty()
