"""Per-service packages: resource handlers, tag glue and sweepers."""
