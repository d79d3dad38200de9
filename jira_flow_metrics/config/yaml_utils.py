"""YAML utilities for configuration processing.

This module loads YAML configuration files into ordered, case-insensitive
dictionaries.
"""

import yaml
from pydicti import odicti


def ordered_load(stream, loader=yaml.SafeLoader, object_pairs_hook=odicti):
    """
    Load YAML mappings as ordered dictionaries.
    """

    def construct_mapping(loader, node, _deep=False):
        """Construct mapping with preserved order."""
        loader.flatten_mapping(node)
        return object_pairs_hook(loader.construct_pairs(node))

    # Subclass with its own constructor table so the base loader is untouched
    FlowLoader = type(
        "FlowLoader", (loader,), {"yaml_constructors": dict(loader.yaml_constructors)}
    )
    FlowLoader.add_constructor(
        yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG, construct_mapping
    )

    return yaml.load(stream, FlowLoader)
