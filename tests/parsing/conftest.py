# ---- Captured ANSI output from common dev tools ----

# zsh with a red error theme
ZSH_NOT_FOUND_ANSI = "\x1b[31mzsh: command not found: bar\x1b[0m"

# Node server log line with a green level tag
NODE_SERVER_ANSI = "\x1b[32m[INFO] Server running at http://localhost:3000\x1b[0m"

# Vite dev server banner
VITE_BANNER_ANSI = (
    "\x1b[32m\x1b[1mVITE\x1b[22m v5.0.0\x1b[39m  \x1b[2mready in \x1b[0m\x1b[1m312\x1b[22m\x1b[2m ms\x1b[22m\r\n"
    "\r\n"
    "  \x1b[32m➜\x1b[39m  \x1b[1mLocal\x1b[22m:   \x1b[36mhttp://localhost:\x1b[1m5173\x1b[22m/\x1b[39m\r\n"
)

# Express startup followed by its route table
EXPRESS_ROUTES_OUTPUT = (
    "GET /api/users\r\n"
    "POST /api/users\r\n"
    "GET /api/users/:id\r\n"
    "DELETE /api/users/:id\r\n"
    "Example app listening on port 4000\r\n"
)

# git status on a branch with unpushed commits
GIT_AHEAD_OUTPUT = (
    "On branch main\n"
    "Your branch is ahead of 'origin/main' by 2 commits.\n"
    '  (use "git push" to publish your local commits)\n'
    "\n"
    "nothing to commit, working tree clean\n"
)

# git status with a colored branch name
GIT_BEHIND_ANSI = (
    "On branch \x1b[1;32mfeature/login\x1b[0m\n"
    "Your branch is behind 'origin/feature/login' by 1 commit, and can be fast-forwarded.\n"
)

# Python traceback tail
PYTHON_ERROR_OUTPUT = (
    "Traceback (most recent call last):\n"
    '  File "app.py", line 3, in <module>\n'
    "    import flask\n"
    "ModuleNotFoundError: No module named 'flask'\n"
)
