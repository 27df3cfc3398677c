"""HTTP routers for the todo backend."""
