"""
Descriptor Loading
==================

Reads the static SpaceAPI descriptor once at startup.

A missing or broken descriptor is logged and replaced by a zero-valued
SpaceDescriptor so the service still starts, closed and with no occupancy.
"""

import json
import logging
from pathlib import Path
from typing import Union

from pydantic import ValidationError

from space_status.models.descriptor import SpaceDescriptor


logger = logging.getLogger(__name__)


def load_descriptor(path: Union[str, Path]) -> SpaceDescriptor:
    """
    Load the SpaceAPI descriptor.

    Args:
        path: Path to the descriptor JSON file

    Returns:
        SpaceDescriptor, or a default one if loading failed
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        descriptor = SpaceDescriptor.model_validate(data)
    except FileNotFoundError:
        logger.error(f"Descriptor not found: {path}, starting with defaults")
        return SpaceDescriptor()
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Failed to read descriptor {path}: {e}")
        return SpaceDescriptor()
    except ValidationError as e:
        logger.error(f"Invalid descriptor {path}: {e.error_count()} validation errors")
        return SpaceDescriptor()

    logger.info(f"Loaded descriptor for {descriptor.space or 'unnamed space'} from {path}")
    return descriptor


def initial_count(descriptor: SpaceDescriptor) -> int:
    """Seed occupancy: the first people_now_present sensor, or 0."""
    sensors = descriptor.sensors.people_now_present
    if not sensors:
        return 0
    return sensors[0].value
