"""Files API (`files.xro`) resource types.

These endpoints speak flat JSON: no root node, no envelope around single
objects, and no batch encoding.
"""

from __future__ import annotations

from src.xero_sync.remote.descriptor import (
    API_FILE,
    METHOD_DELETE,
    METHOD_GET,
    METHOD_POST,
    METHOD_PUT,
    PropertyMeta as P,
    PropertyType as T,
    ResourceDescriptor,
)

ASSOCIATION = ResourceDescriptor(
    name="Association",
    resource_uri="Associations",
    root_node_name="",
    guid_property="ObjectId",
    api_stem=API_FILE,
    supported_methods=frozenset({METHOD_GET, METHOD_POST, METHOD_DELETE}),
    create_method=METHOD_POST,
    properties=(
        P("FileId"),
        P("ObjectId", required=True),
        P("ObjectGroup"),
        P("ObjectType"),
    ),
)

FILE = ResourceDescriptor(
    name="File",
    resource_uri="Files",
    root_node_name="",
    guid_property="Id",
    api_stem=API_FILE,
    supported_methods=frozenset({METHOD_GET, METHOD_PUT, METHOD_DELETE}),
    create_method=METHOD_POST,
    properties=(
        P("Id"),
        P("Name"),
        P("MimeType", read_only=True),
        P("Size", T.INT, read_only=True),
        P("FolderId"),
        P("CreatedDateUtc", T.DATETIME, read_only=True),
        P("UpdatedDateUtc", T.DATETIME, read_only=True),
        P("Associations", T.OBJECT, related=ASSOCIATION, is_array=True, save_directly=True),
    ),
)

FOLDER = ResourceDescriptor(
    name="Folder",
    resource_uri="Folders",
    root_node_name="",
    guid_property="Id",
    api_stem=API_FILE,
    supported_methods=frozenset({METHOD_GET, METHOD_PUT, METHOD_POST, METHOD_DELETE}),
    create_method=METHOD_POST,
    properties=(
        P("Id"),
        P("Name", required=True),
        P("FileCount", T.INT, read_only=True),
        P("Email", read_only=True),
        P("IsInbox", T.BOOLEAN, read_only=True),
    ),
)

FILES_DESCRIPTORS = (ASSOCIATION, FILE, FOLDER)
