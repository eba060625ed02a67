"""Store business logic, called by routers, tasks and tests."""
