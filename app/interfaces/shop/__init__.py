"""HTTP routers for the shop bounded context."""
