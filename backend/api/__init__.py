"""HTTP routers: analyze (pipeline endpoints) and health."""
