# wildgecu

Building blocks for running an AI agent from the command line:

- `wildgecu.cronjob`: LLM prompts stored as Markdown files with YAML
  front matter, and running one of them through a model.
- `wildgecu.schedule`: a cron expression parser and a background scheduler
  that runs the jobs of a directory when they are due (times in UTC).
- `wildgecu.filetools`: listing, reading, writing and editing files relative
  to a working directory.
- `wildgecu.commands`: running `bash -c` commands and `node -e` scripts with
  a timeout.
- `wildgecu.prompts`: conversation messages, transcripts, the agent's
  `SOUL.md` / `MEMORY.md` files and system prompt assembly.
- `wildgecu.client`: a newline-delimited JSON client for an agent daemon's
  Unix socket.
- `wildgecu.cli`: the `wildgecu` command for listing and removing cron jobs
  and showing the daemon log.

## Installation

```
pip install .
```

## Cron job files

A cron job is a Markdown file named `<name>.md`:

```
---
name: daily-summary
cron: "0 9 * * *"
---
Summarize my day
```

Both `name` and `cron` are required; the text after the front matter,
stripped of surrounding whitespace, is the prompt.

```python
from wildgecu.cronjob import CronJob, CronError, parse, serialize, filename, load_all

job = parse(b'---\nname: daily-summary\ncron: "0 9 * * *"\n---\nSummarize my day')
data = serialize(CronJob(name="weekly-report", schedule="0 0 * * 1", prompt="Report"))
filename("weekly-report")            # "weekly-report.md"
jobs, errors = load_all("crons")     # parsed jobs, and one CronError per bad file
```

`parse` raises `CronError` for a missing delimiter, bad YAML or a missing
field. `load_all` reads every `*.md` file of a directory in name order and
returns an empty result when the directory does not exist.

### Running jobs

`ExecutorConfig` holds a `provider` (any callable taking the prompt text and
returning the reply), a `results_dir` and a `logger`. `execute(config, job)`
calls the provider and writes the reply to
`<results_dir>/<name>-YYYYMMDD-HHMMSS.md` (UTC time stamp), returning that
path. Failures of the provider or of the write are logged and give `None`.

```python
from pathlib import Path
from wildgecu.cronjob import ExecutorConfig
from wildgecu.schedule import Scheduler

config = ExecutorConfig(provider=lambda prompt: "reply to " + prompt,
                        results_dir=Path("cron-results"))
scheduler = Scheduler("crons", config)
scheduler.load_and_start()
scheduler.job_count()
scheduler.list_jobs()    # JobInfo(name, schedule, next_run, last_run), RFC 3339 UTC
scheduler.reload()       # drop all jobs and read the directory again
scheduler.stop()
```

Each due job runs in its own thread. Jobs whose schedule does not parse are
logged and left out.

`CronExpression.parse` accepts five fields (minute, hour, day of month,
month, weekday) with `*`, `?`, lists, ranges, steps and month or day names,
as well as `@yearly`, `@annually`, `@monthly`, `@weekly`, `@daily`,
`@midnight` and `@hourly`. `next_after(moment)` returns the first matching
minute strictly after `moment`. When both day of month and weekday are
restricted, a day matching either one matches.

## Agent tools

```python
from wildgecu.filetools import list_files, read_file, write_file, update_file

list_files("/project", pattern="*.py")        # sorted, at most 500 entries
read_file("/project", "main.py", offset=10, limit=20)
write_file("/project", "out/notes.txt", "text", create=True)
update_file("/project", "main.py", "old", "new")
```

Relative paths are resolved against the working directory, absolute ones
are used as given. `read_file` numbers each line (`"<n>\t<line>\n"`),
returns at most 10000 lines plus the file's total line count, and raises
`ValueError` for content that is not UTF-8. `update_file` raises
`ValueError` unless the old string occurs exactly once.

```python
from wildgecu.commands import run_bash, run_node

result = run_bash("ls -l", cwd="/project", timeout=30)
result.stdout, result.stderr, result.exit_code
```

A command killed by the timeout or by a signal reports exit code `-1`.

## Prompts

`load_soul(home)` and `load_memory(home)` read `SOUL.md` and `MEMORY.md`
from a directory and raise `FileNotFoundError` when the file is absent;
`write_soul(home, content)` writes `SOUL.md`.

`build_system_prompt(agent_prompt, soul, memory, workspace)` joins
`# Agent`, `# Agent Soul`, `# Memory` and `# User Preferences` (from the
workspace's `USER.md`) sections, leaving out the empty ones.
`build_code_system_prompt` does the same after replacing `{CWD}` in the
prompt with the working directory.

`format_transcript(messages)` renders `Message` objects (`Role.USER`,
`Role.MODEL`, `Role.TOOL`, with optional `ToolCall`s) as Markdown, cutting
tool results to 200 characters. `current_time(timezone)` gives the current
time in an IANA zone (UTC by default) in RFC 3339 form.

## Daemon client

```python
from wildgecu.client import Client

with Client.connect("/path/to/wildgecu.sock") as client:
    session_id, welcome = client.create_session()
    client.send_message(session_id, "Hello")
    while (event := client.read_event()).type not in ("done", "error"):
        print(event.type, event.content)
    client.close_session(session_id)
```

`create_code_session(work_dir)` opens a code-mode session and
`interrupt_session(session_id)` interrupts the current turn. Failures raise
`ClientError`.

## Command line

The home directory is `~/.wildgecu`, or `$WILDGECU_HOME`, or the
`--home` option. Cron jobs live in its `crons` directory.

List the cron jobs:

```
wildgecu cron ls
```

Remove one:

```
wildgecu cron rm daily-summary
```

Show the last 50 lines of `wildgecu.log`, optionally following it:

```
wildgecu logs
wildgecu logs --follow
```

## What it does not do

The package has no daemon, no LLM provider and no interactive chat screen:
`Client` needs a daemon to talk to, and `ExecutorConfig` needs a provider
callable that you supply. There is no command for adding cron jobs; write
the files by hand or with `serialize`. `cron rm` does not ask a running
daemon to reload its jobs.

## Tests

```
pip install .[test]
pytest
```