"""Core types shared by every layer: enums, errors, ids, events, entities."""
