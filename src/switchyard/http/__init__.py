"""HTTP primitives — request, headers, query parameters, response writer."""
