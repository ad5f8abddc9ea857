# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Conversion of plugin file names into public entity names."""

import re

_WORD_START = re.compile(r"(?:^|-)[a-z]")


def entity_name(filename: str) -> str:
    """Convert a kebab-case base name into a PascalCase entity name.

    'event-handler' → 'EventHandler', 'alert' → 'Alert'. Only meant for
    kebab-case input; an already PascalCase name comes back unchanged.

    Args:
        filename: File base name without its extension

    Returns:
        Entity name used as registry key and UMD global name
    """
    return _WORD_START.sub(lambda match: match.group(0)[-1].upper(), filename)
