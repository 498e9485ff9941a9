"""HTTP surface shared by the storefront routers: auth dependencies, error mapping and the app factory."""
