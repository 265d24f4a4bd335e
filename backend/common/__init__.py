"""Cross-cutting helpers: error taxonomy, service configuration, pagination."""
