"""Domain layer: entities, enums, errors, ports and validation rules."""
