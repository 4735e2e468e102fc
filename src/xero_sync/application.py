"""Synchronization engine.

Reconciles local `Model` objects with the remote API:
- decides create vs update from the presence of a GUID
- picks the verb, the URI and the wire encoding (XML under the type's root
  node, or flat JSON when the type has none)
- persists "save-directly" relationship properties through their own
  sub-resource endpoints
- folds (possibly partial) responses back into the objects and clears their
  dirty flags for whatever succeeded

Every public call is synchronous: it issues its requests one after another
and returns (or raises) when they are done. Nothing is retried.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable, Mapping

from src.xero_sync.config import DEFAULT_CONFIG, config_from_env, merge_config
from src.xero_sync.exceptions import ConfigurationError, InvalidBatchError, UnsupportedMethodError
from src.xero_sync.helpers import array_to_xml, pluralize
from src.xero_sync.models import default_registry
from src.xero_sync.remote.descriptor import (
    METHOD_DELETE,
    METHOD_GET,
    METHOD_POST,
    METHOD_PUT,
    DescriptorRegistry,
    ResourceDescriptor,
)
from src.xero_sync.remote.model import Model
from src.xero_sync.remote.query import Query
from src.xero_sync.remote.request import Request
from src.xero_sync.remote.response import Response
from src.xero_sync.remote.url import URL

logger = logging.getLogger(__name__)


def _create_method_for(descriptor: ResourceDescriptor) -> str:
    """Verb used to create a new record of this type.

    An explicit `create_method` wins; otherwise PUT is preferred over POST.
    """

    if descriptor.create_method is not None:
        return descriptor.create_method
    return METHOD_PUT if descriptor.supports_method(METHOD_PUT) else METHOD_POST


def _update_method_for(descriptor: ResourceDescriptor) -> str:
    # Updates prefer POST over PUT; the API overloads verbs per resource type.
    return METHOD_POST if descriptor.supports_method(METHOD_POST) else METHOD_PUT


class Application:
    def __init__(
        self,
        config: Mapping[str, Any] | None = None,
        *,
        registry: DescriptorRegistry | None = None,
    ) -> None:
        self._config: dict[str, Any] = {}
        self.set_config(config or {})
        self.registry = registry if registry is not None else default_registry()

    @classmethod
    def from_env(cls, *, registry: DescriptorRegistry | None = None) -> "Application":
        return cls(config_from_env(), registry=registry)

    # Configuration

    def get_config(self, key: str) -> dict[str, Any]:
        if key not in self._config:
            raise ConfigurationError(f"Invalid configuration key [{key}]")
        return self._config[key]

    def get_config_option(self, key: str, option: str) -> Any:
        section = self.get_config(key)
        if option not in section:
            raise ConfigurationError(f"Invalid configuration option [{option}]")
        return section[option]

    def set_config(self, config: Mapping[str, Any]) -> dict[str, Any]:
        self._config = merge_config(DEFAULT_CONFIG, config)
        return self._config

    def set_config_option(self, key: str, option: str, value: Any) -> dict[str, Any]:
        self.get_config(key)[option] = value
        return self._config

    def validate_model_type(self, model: str | ResourceDescriptor) -> ResourceDescriptor:
        """Resolve a type tag (or pass through a descriptor)."""

        if isinstance(model, ResourceDescriptor):
            return model
        if isinstance(model, str):
            return self.registry.get(model)
        raise ConfigurationError(f"Invalid model type [{model!r}]")

    def create(self, model: str | ResourceDescriptor, values: Mapping[str, Any] | None = None) -> Model:
        return Model(self.validate_model_type(model), values)

    # Retrieval

    def load(self, model: str | ResourceDescriptor) -> Query:
        return Query(self).from_(model)

    def load_by_guid(self, model: str | ResourceDescriptor, guid: str) -> Model | None:
        """Fetch one record by GUID.

        A GUID that does not exist surfaces as `NotFoundError` from the
        transport; `None` only means the API answered with no elements.
        """

        descriptor = self.validate_model_type(model)
        url = URL(self, f"{descriptor.resource_uri}/{guid}", descriptor.api_stem)
        response = Request(self, url, METHOD_GET).send()

        elements = response.elements
        if not elements:
            return None

        # Types without a root node come back as one flat object; wrapped types
        # as a collection of which only the first element is used.
        obj = Model(descriptor)
        obj.from_string_array(elements[0])
        return obj

    def load_by_guids(self, model: str | ResourceDescriptor, guids: str | Iterable[str]) -> list[Model]:
        descriptor = self.validate_model_type(model)
        if not isinstance(guids, str):
            guids = ",".join(str(guid) for guid in guids)

        url = URL(self, descriptor.resource_uri, descriptor.api_stem)
        request = Request(self, url, METHOD_GET)
        request.set_parameter("IDs", guids)
        response = request.send()

        results: list[Model] = []
        for element in response.elements:
            obj = Model(descriptor)
            obj.from_string_array(element)
            results.append(obj)
        return results

    # Persistence

    def save(self, obj: Model, replace_data: bool = False) -> Response | None:
        """Persist `obj` and its dirty save-directly properties.

        Returns None (and sends nothing for the object itself) when the object
        has no dirty fields of its own.
        """

        self._save_properties_directly(obj)

        if not obj.is_dirty():
            return None
        obj.validate()

        descriptor = obj.descriptor
        if obj.has_guid():
            method = _update_method_for(descriptor)
            uri = f"{descriptor.resource_uri}/{obj.guid}"
        else:
            method = _create_method_for(descriptor)
            uri = descriptor.resource_uri

        if not descriptor.supports_method(method):
            raise UnsupportedMethodError(descriptor.name, method)

        # Relationship saves need the parent GUID; hold them until the create lands.
        deferred = {} if obj.has_guid() else {
            meta.name: obj.get(meta.name)
            for meta in descriptor.save_directly_properties
            if obj.is_dirty(meta.name)
        }

        request = Request(self, URL(self, uri, descriptor.api_stem), method)
        if descriptor.root_node_name:
            data = {descriptor.root_node_name: obj.to_string_array(dirty_only=True)}
            request.set_body(array_to_xml(data))
        else:
            request.set_body(
                json.dumps(obj.to_string_array(dirty_only=True)), Request.CONTENT_TYPE_JSON
            )

        response = request.send()

        elements = response.elements
        if elements:
            obj.from_string_array(elements[0], replace_data=replace_data)

        obj.set_clean()

        if deferred and obj.has_guid():
            # The create response echoes these properties empty; put the pending values back.
            for name, pending in deferred.items():
                obj.set(name, pending)
                obj.set_dirty(name)
            self._save_properties_directly(obj)

        return response

    def save_relationships(self, obj: Model) -> None:
        self._save_properties_directly(obj)

    def save_all(self, objects: Iterable[Model], check_guid: bool = True) -> Response:
        """Persist a homogeneous batch in one request.

        Items are matched to response elements by position. Items whose element
        carries errors stay dirty and untouched; inspect the returned Response
        for the details.
        """

        objects = list(objects)
        if not objects:
            raise InvalidBatchError("save_all() requires at least one object")

        descriptor = objects[0].descriptor
        has_guid = objects[0].has_guid() if check_guid else True
        object_arrays: list[dict[str, Any]] = []

        for obj in objects:
            if obj.descriptor != descriptor:
                raise InvalidBatchError("Objects passed to save_all() must be homogeneous.")
            if obj.has_guid():
                has_guid = True
            object_arrays.append(obj.to_string_array(dirty_only=True))

        if not descriptor.root_node_name:
            raise InvalidBatchError(f"{descriptor.name} cannot be saved in a batch")

        method = METHOD_POST if has_guid else METHOD_PUT
        if not descriptor.supports_method(method):
            raise UnsupportedMethodError(descriptor.name, method)

        url = URL(self, descriptor.resource_uri, descriptor.api_stem)
        request = Request(self, url, method)
        request.set_body(array_to_xml({pluralize(descriptor.root_node_name): object_arrays}))
        request.set_parameter("SummarizeErrors", "false")
        response = request.send()

        self._fold_batch(response, objects)
        return response

    def _fold_batch(self, response: Response, objects: list[Model]) -> dict[int, list[str]]:
        errors: dict[int, list[str]] = {}
        for index, element in enumerate(response.elements):
            element_errors = response.get_errors_for_element(index)
            if element_errors is not None:
                errors[index] = element_errors
                continue
            if index < len(objects):
                objects[index].from_string_array(element)
                objects[index].set_clean()

        if errors:
            logger.warning(
                "%s of %s item(s) rejected: indexes %s",
                len(errors),
                len(objects),
                sorted(errors),
            )
        return errors

    def _save_properties_directly(self, obj: Model) -> None:
        """Persist dirty save-directly properties through their sub-resource endpoints.

        The parent property is marked clean once processed even if some items
        failed; the per-index errors are kept in `obj.relationship_errors`.
        """

        for meta in obj.descriptor.save_directly_properties:
            if not obj.is_dirty(meta.name):
                continue
            if not obj.has_guid():
                logger.debug(
                    "Deferring %s.%s until the parent has a GUID", obj.type_name, meta.name
                )
                continue

            value = obj.get(meta.name)
            if isinstance(value, Model):
                errors = self._save_related_object(obj, value)
            elif value:
                errors = self._save_related_collection(obj, list(value))
            else:
                errors = {}

            obj.relationship_errors[meta.name] = errors
            obj.set_clean(meta.name)

    def _sub_resource_url(self, obj: Model, child: ResourceDescriptor, api_stem: str) -> URL:
        uri = f"{obj.descriptor.resource_uri}/{obj.guid}/{child.resource_uri}"
        return URL(self, uri, api_stem)

    def _save_related_object(self, obj: Model, related: Model) -> dict[int, list[str]]:
        child = related.descriptor
        url = self._sub_resource_url(obj, child, child.api_stem)

        request = Request(self, url, _create_method_for(child))
        request.set_body(
            json.dumps(related.to_string_array(dirty_only=True)), Request.CONTENT_TYPE_JSON
        )
        response = request.send()

        errors = response.element_errors
        elements = response.elements
        if elements and 0 not in errors:
            for key, raw in elements[0].items():
                setter = child.setters.get(key)
                if setter is not None:
                    setter(related, raw)
                    related.set_clean(key)
        return errors

    def _save_related_collection(self, obj: Model, related: list[Model]) -> dict[int, list[str]]:
        child = related[0].descriptor
        url = self._sub_resource_url(obj, child, obj.descriptor.api_stem)
        method = _create_method_for(child)
        arrays = [item.to_string_array() for item in related]

        if child.root_node_name:
            request = Request(self, url, method)
            request.set_body(array_to_xml({pluralize(child.root_node_name): arrays}))
            return self._fold_batch(request.send(), related)

        if len(arrays) > 1:
            # No batching for flat JSON types: one request per item, in order.
            # The caller still goes on to the object's other save-directly properties.
            errors: dict[int, list[str]] = {}
            for index, (item, data) in enumerate(zip(related, arrays)):
                request = Request(self, url, method)
                request.set_body(json.dumps(data), Request.CONTENT_TYPE_JSON)
                item_errors = self._fold_batch(request.send(), [item])
                if 0 in item_errors:
                    errors[index] = item_errors[0]
            return errors

        request = Request(self, url, method)
        request.set_body(json.dumps(arrays[0]), Request.CONTENT_TYPE_JSON)
        return self._fold_batch(request.send(), related)

    def delete(self, obj: Model) -> Model:
        descriptor = obj.descriptor
        if not descriptor.supports_method(METHOD_DELETE):
            raise UnsupportedMethodError(descriptor.name, METHOD_DELETE)
        if not obj.has_guid():
            raise ConfigurationError(f"{descriptor.name} has no GUID to delete")

        url = URL(self, f"{descriptor.resource_uri}/{obj.guid}", descriptor.api_stem)
        response = Request(self, url, METHOD_DELETE).send()

        elements = response.elements
        if elements:
            # Some endpoints answer with the record's post-delete state.
            obj.from_string_array(elements[0], replace_data=True)
        return obj
