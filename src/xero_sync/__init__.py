"""Sync engine for the Xero accounting API.

Entry point is `src.xero_sync.application.Application`:
- `save` / `save_all` / `delete` push dirty local objects to the API
- `load_by_guid` / `load_by_guids` / `load` pull records into local objects

Keep modules below `remote/` free of engine policy (verb choice, folding);
they describe types and move bytes.
"""
