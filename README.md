# leetboard

A small anonymous message board served as a WSGI application. Visitors
get a throwaway identity, a character name and avatar picked at random,
without signing up. They can start threads and reply to them. Threads
that go quiet are moved to an archive.

## How threads live and die

Each time the front page is shown, every thread is checked:

- A thread with no replies stays on the front page for 10 minutes after
  it was created.
- A thread with replies stays there while its newest reply is less than
  15 minutes old.
- Anything older has its `archived_at` time set and is left off the front
  page. `/archive` lists every thread, archived or not. An archived
  thread is shown with the `archive-post.html` template instead of
  `post.html`.

Replies can answer other replies (`parent_id`); they are passed to the
templates as a tree. A reply whose parent is unknown is shown at the top
level.

## Sessions

Every request goes through a session step. Without a valid `session_id`
cookie, a new user is made: a random 32-character hex id, a character
name and image fetched from a public character API, and an expiry seven
days ahead. The cookie is then set with `Path=/`, `HttpOnly`,
`SameSite=Lax` and `Secure`. When a session has expired a fresh identity
is handed out. If the character API cannot be reached, the request is
answered with status 500 and the error as plain text. Fetching identities
therefore needs network access.

## Pages

| Method | Path                 | What it does                            |
|--------|----------------------|-----------------------------------------|
| GET    | `/`                  | Catalog of active threads               |
| GET    | `/archive`           | Every thread                            |
| GET    | `/create`            | Form for a new thread                   |
| POST   | `/create`            | Create a thread (`title`, `content`), then redirect to `/` |
| GET    | `/post/<id>`         | A thread and its replies                |
| POST   | `/post/<id>/comment` | Reply (`content`, optional `parent_id`), then redirect to the thread |

`/post` redirects to `/post/`. Any other path is answered with the
`error.html` page and status 404. A thread id that is not an unsigned
integer gives 400 ("invalid post ID"). A thread that does not exist gives
404 ("no posts"). Storage failures give 500 ("Failed to load threads.").

## Installing

```
pip install .
```

## Running

```
leetboard --port 4000
```

The server listens on all interfaces, on port 4000 unless told otherwise.

Options, given as name/value pairs:

- `--port N` sets the port. It must be between 1024 and 65535.
- `--endpoints` prints a fixed listing of API endpoints and exits. The
  listing describes order, menu, inventory and report endpoints. This
  application does not serve them; its own pages are the ones in the
  table above.
- `--help` prints usage and exits. It is honoured wherever it appears.

An unknown option, or a bad port, is reported on standard error and the
command exits with status 1.

The HTML templates are read from `templates/` in the working directory.
It must contain at least one `*.html` file. The pages use `catalog.html`,
`archive.html`, `post.html`, `archive-post.html`, `create-post.html` and
`error.html`. They receive `posts`, `post`, `comment_tree`, `user`,
`status_code` and `message`, depending on the page.

## Configuration

Settings are read from the environment:

| Variable        | Meaning                                              |
|-----------------|------------------------------------------------------|
| `APP_NAME`      | Application name, shown in the start-up log line     |
| `APP_ENV`       | Environment name, shown in the start-up log line     |
| `DB_CONNECTION` | Must be empty, `sqlite` or `sqlite3`                 |
| `DB_NAME`       | SQLite database file (default `leetboard.db`)        |
| `DB_HOST`, `DB_PORT`, `DB_USER`, `DB_PASSWORD` | Read into the settings, not used by the command |

The `posts`, `comments` and `users` tables are created when they do not
exist. Logs go to standard error as `key=value` lines.

## What it does not do

- The command stores data only in SQLite. Any other `DB_CONNECTION`
  value stops it with "Failed to connect to the database".
- No templates are shipped with the package. You must provide them.
- Posts have an `image` field, but the create form does not accept image
  uploads. Nothing stores image files.
- The usage screen mentions `--dir <S>`, but the option is not accepted.

## Using the pieces

- `leetboard.domain`: the `Post`, `Comment`, `CommentNode`,
  `PostComments` and `User` records.
- `leetboard.ports`: the abstract `PostRepository`, `CommentRepository`,
  `UserRepository` and `AvatarProvider`. It also holds the errors
  `NoRowsError`, `NoPostsError` and `InvalidPostIdError`.
- `leetboard.repository`: SQL implementations of the repositories over
  any DB-API 2.0 connection. The parameter placeholder defaults to `%s`;
  pass `"?"` for SQLite.
- `leetboard.services`: `PostService` applies the archiving rules above.
  `UserService.find_or_create` hands out sessions. `parse_post_id`
  parses thread ids. Both services take an optional `clock`.
- `leetboard.avatar`: `RickAndMortyClient` and `fetch_json`. The client
  takes an optional fetch function and random generator.
- `leetboard.config`: `load_config`, `parse_flags`, `help_text` and
  `endpoints_text`.
- `leetboard.logger`: `configure_logging`.
- `leetboard.web`: `PostHandler`, `SessionMiddleware`,
  `build_comment_tree`, `render_error`, `load_templates`, and
  `create_app`, which builds the WSGI application.
- `leetboard.app`: `run` and `main`, behind the `leetboard` command.

## Tests

```
pip install ".[test]"
pytest
```