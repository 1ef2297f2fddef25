"""
Dark ToDo package.

A single-page task list: a controller that keeps an in-memory, importance-sorted
task collection in step with a hosted `tasks` table, served through FastAPI.
The application instance lives in `dark_todo.main`.
"""
