"""Reading, merging and writing the App Engine application descriptor.

The descriptor is the `app.yml` file handed to `gcloud app deploy`. The only
change made to it is the `env_variables` mapping, which is rebuilt from the
original values, the host's production environment block and the resolved
secrets, in that order:

```python
from gae_deploy import descriptor

doc = await descriptor.read_descriptor(Path("app.yml"))
doc = descriptor.mutate_descriptor(doc, {"NODE_ENV": "production"}, secrets)
await descriptor.write_descriptor(Path("app.yml"), doc)
```

The write is a plain overwrite of the file. There is no backup and no
temporary-file rename, so a crash in the middle of a write can leave a
truncated descriptor.
"""

from collections.abc import Mapping
import logging
from pathlib import Path
from typing import Any

import aiofiles
import yaml

from .exceptions import InputException

__all__ = [
    "ENV_VARIABLES",
    "read_descriptor",
    "write_descriptor",
    "merge_env_variables",
    "mutate_descriptor",
]

_LOGGER = logging.getLogger(__name__)

ENV_VARIABLES = "env_variables"


async def read_descriptor(path: Path) -> dict[str, Any] | None:
    """Return the parsed descriptor, or None if there is no usable descriptor."""
    try:
        async with aiofiles.open(str(path)) as descriptor_file:
            content = await descriptor_file.read()
    except (OSError, UnicodeDecodeError) as err:
        _LOGGER.debug("Unable to read descriptor %s: %s", path, err)
        return None
    try:
        doc = yaml.safe_load(content)
    except yaml.YAMLError as err:
        _LOGGER.debug("Unable to parse descriptor %s: %s", path, err)
        return None
    if not doc or not isinstance(doc, dict):
        _LOGGER.debug("Descriptor %s is empty or not a mapping", path)
        return None
    return doc


async def write_descriptor(path: Path, document: Mapping[str, Any]) -> None:
    """Overwrite the descriptor file with the serialized document."""
    content = yaml.safe_dump(
        dict(document), sort_keys=False, default_flow_style=False
    )
    try:
        async with aiofiles.open(str(path), mode="w") as descriptor_file:
            await descriptor_file.write(content)
    except OSError as err:
        raise InputException(f"Unable to write descriptor {path}: {err}") from err
    _LOGGER.debug("Wrote descriptor %s", path)


def merge_env_variables(*sources: Mapping[str, Any] | None) -> dict[str, Any]:
    """Merge the mappings left to right, later keys overwrite earlier ones."""
    result: dict[str, Any] = {}
    for source in sources:
        if source:
            result.update(source)
    return result


def mutate_descriptor(
    document: Mapping[str, Any],
    production: Mapping[str, Any] | None,
    secret_vars: Mapping[str, str] | None,
) -> dict[str, Any]:
    """Return a copy of the descriptor with the merged `env_variables`."""
    original = document.get(ENV_VARIABLES)
    if original is not None and not isinstance(original, Mapping):
        _LOGGER.warning(
            "Ignoring %s in descriptor, expected a mapping but got %s",
            ENV_VARIABLES,
            type(original).__name__,
        )
        original = None
    return {
        **document,
        ENV_VARIABLES: merge_env_variables(original, production, secret_vars),
    }
