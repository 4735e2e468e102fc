"""Accounting API (`api.xro`) resource types.

Sub-object types (Address, Phone, LineItem) have no endpoint of their own and
are only ever serialized inline with their parent.
"""

from __future__ import annotations

from src.xero_sync.remote.descriptor import (
    METHOD_DELETE,
    METHOD_GET,
    METHOD_POST,
    METHOD_PUT,
    PropertyMeta as P,
    PropertyType as T,
    ResourceDescriptor,
)

_READ_WRITE = frozenset({METHOD_GET, METHOD_PUT, METHOD_POST})
_READ_WRITE_DELETE = _READ_WRITE | {METHOD_DELETE}


ORGANISATION = ResourceDescriptor(
    name="Organisation",
    resource_uri="Organisation",
    root_node_name="Organisation",
    guid_property="OrganisationID",
    supported_methods=frozenset({METHOD_GET}),
    properties=(
        P("OrganisationID", read_only=True),
        P("Name", read_only=True),
        P("LegalName", read_only=True),
        P("BaseCurrency", read_only=True),
        P("CountryCode", read_only=True),
        P("IsDemoCompany", T.BOOLEAN, read_only=True),
        P("CreatedDateUTC", T.DATETIME, read_only=True),
    ),
)

ADDRESS = ResourceDescriptor(
    name="Address",
    resource_uri="",
    root_node_name="Address",
    guid_property="",
    supported_methods=frozenset(),
    properties=(
        P("AddressType"),
        P("AddressLine1"),
        P("AddressLine2"),
        P("City"),
        P("Region"),
        P("PostalCode"),
        P("Country"),
    ),
)

PHONE = ResourceDescriptor(
    name="Phone",
    resource_uri="",
    root_node_name="Phone",
    guid_property="",
    supported_methods=frozenset(),
    properties=(
        P("PhoneType"),
        P("PhoneNumber"),
        P("PhoneAreaCode"),
        P("PhoneCountryCode"),
    ),
)

CONTACT = ResourceDescriptor(
    name="Contact",
    resource_uri="Contacts",
    root_node_name="Contact",
    guid_property="ContactID",
    supported_methods=_READ_WRITE,
    properties=(
        P("ContactID"),
        P("ContactNumber"),
        P("AccountNumber"),
        P("ContactStatus"),
        P("Name", required=True),
        P("FirstName"),
        P("LastName"),
        P("EmailAddress"),
        P("TaxNumber"),
        P("DefaultCurrency"),
        P("Addresses", T.OBJECT, related=ADDRESS, is_array=True),
        P("Phones", T.OBJECT, related=PHONE, is_array=True),
        P("IsSupplier", T.BOOLEAN, read_only=True),
        P("IsCustomer", T.BOOLEAN, read_only=True),
        P("UpdatedDateUTC", T.DATETIME, read_only=True),
    ),
)

CONTACT_GROUP = ResourceDescriptor(
    name="ContactGroup",
    resource_uri="ContactGroups",
    root_node_name="ContactGroup",
    guid_property="ContactGroupID",
    supported_methods=_READ_WRITE,
    properties=(
        P("ContactGroupID"),
        P("Name", required=True),
        P("Status"),
        P("Contacts", T.OBJECT, related=CONTACT, is_array=True, save_directly=True),
    ),
)

LINE_ITEM = ResourceDescriptor(
    name="LineItem",
    resource_uri="",
    root_node_name="LineItem",
    guid_property="LineItemID",
    supported_methods=frozenset(),
    properties=(
        P("LineItemID"),
        P("Description"),
        P("Quantity", T.DECIMAL),
        P("UnitAmount", T.DECIMAL),
        P("ItemCode"),
        P("AccountCode"),
        P("TaxType"),
        P("DiscountRate", T.DECIMAL),
        P("LineAmount", T.DECIMAL),
        P("TaxAmount", T.DECIMAL, read_only=True),
    ),
)

INVOICE = ResourceDescriptor(
    name="Invoice",
    resource_uri="Invoices",
    root_node_name="Invoice",
    guid_property="InvoiceID",
    supported_methods=_READ_WRITE,
    properties=(
        P("InvoiceID"),
        P("Type", required=True),
        P("Contact", T.OBJECT, related=CONTACT, required=True),
        P("LineItems", T.OBJECT, related=LINE_ITEM, is_array=True),
        P("Date", T.DATE),
        P("DueDate", T.DATE),
        P("LineAmountTypes"),
        P("InvoiceNumber"),
        P("Reference"),
        P("CurrencyCode"),
        P("Status"),
        P("SubTotal", T.DECIMAL, read_only=True),
        P("TotalTax", T.DECIMAL, read_only=True),
        P("Total", T.DECIMAL, read_only=True),
        P("AmountDue", T.DECIMAL, read_only=True),
        P("AmountPaid", T.DECIMAL, read_only=True),
        P("UpdatedDateUTC", T.DATETIME, read_only=True),
    ),
)

ITEM = ResourceDescriptor(
    name="Item",
    resource_uri="Items",
    root_node_name="Item",
    guid_property="ItemID",
    supported_methods=_READ_WRITE_DELETE,
    properties=(
        P("ItemID"),
        P("Code", required=True),
        P("Name"),
        P("Description"),
        P("PurchaseDescription"),
        P("IsSold", T.BOOLEAN),
        P("IsPurchased", T.BOOLEAN),
        P("IsTrackedAsInventory", T.BOOLEAN, read_only=True),
        P("UpdatedDateUTC", T.DATETIME, read_only=True),
    ),
)

ACCOUNT = ResourceDescriptor(
    name="Account",
    resource_uri="Accounts",
    root_node_name="Account",
    guid_property="AccountID",
    supported_methods=_READ_WRITE_DELETE,
    properties=(
        P("AccountID"),
        P("Code"),
        P("Name", required=True),
        P("Type", required=True),
        P("TaxType"),
        P("Description"),
        P("Status"),
        P("BankAccountNumber"),
        P("EnablePaymentsToAccount", T.BOOLEAN),
        P("UpdatedDateUTC", T.DATETIME, read_only=True),
    ),
)

TRACKING_OPTION = ResourceDescriptor(
    name="TrackingOption",
    resource_uri="Options",
    root_node_name="Option",
    guid_property="TrackingOptionID",
    supported_methods=_READ_WRITE_DELETE,
    create_method=METHOD_PUT,
    properties=(
        P("TrackingOptionID"),
        P("Name", required=True),
        P("Status"),
    ),
)

TRACKING_CATEGORY = ResourceDescriptor(
    name="TrackingCategory",
    resource_uri="TrackingCategories",
    root_node_name="TrackingCategory",
    guid_property="TrackingCategoryID",
    supported_methods=_READ_WRITE_DELETE,
    properties=(
        P("TrackingCategoryID"),
        P("Name", required=True),
        P("Status"),
        P("Options", T.OBJECT, related=TRACKING_OPTION, is_array=True, save_directly=True),
    ),
)

ACCOUNTING_DESCRIPTORS = (
    ORGANISATION,
    ADDRESS,
    PHONE,
    CONTACT,
    CONTACT_GROUP,
    LINE_ITEM,
    INVOICE,
    ITEM,
    ACCOUNT,
    TRACKING_OPTION,
    TRACKING_CATEGORY,
)
