"""Remote layer: resource descriptors, local models and the HTTP transport.

- descriptor: per-type metadata + registry
- dirty / model: local object state
- url / request / response: one blocking HTTP call and its parsed result
- query: filtered listing
"""
