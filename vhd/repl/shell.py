"""Interactive REPL shell for drive navigation."""

import logging
import os
import shlex
import uuid
from pathlib import Path
from typing import Callable, Dict, List, NamedTuple, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory, InMemoryHistory
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.styles import Style
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from vhd.errors import AlreadyExistsError, InvalidOperationError, NotFoundError, VHDError
from vhd.storage.checksum import crc32c_file, format_crc32c
from vhd.vfs import DriveVFS, Node, find, walk

logger = logging.getLogger(__name__)

DATE_FORMAT = "%d %b %y %H:%M"


class ShellCommand(NamedTuple):
    """A shell command with its argument bounds (max_args None = unbounded)."""
    min_args: int
    max_args: Optional[int]
    handler: Callable[[List[str]], None]
    usage: str
    help: str


class PathCompleter(Completer):
    """Tab completion for VFS paths."""

    def __init__(self, vfs: DriveVFS):
        self.vfs = vfs

    def get_completions(self, document, complete_event):
        """Get path completion candidates."""
        text = document.text_before_cursor
        words = text.split()

        # Only complete arguments, and an empty word after a trailing space
        if len(words) > 1 and not text.endswith(" "):
            partial = words[-1]
        elif words and text.endswith(" "):
            partial = ""
        else:
            return

        for candidate in self.vfs.complete(partial):
            yield Completion(candidate, start_position=-len(partial))


def format_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size // 1024} KiB"
    if size < 1024 * 1024 * 1024:
        return f"{size // (1024 * 1024)} MiB"
    return f"{size // (1024 * 1024 * 1024)} GiB"


class DriveShell:
    """Interactive shell over the drives' virtual filesystem.

    Every command failure is reported as ``<command>: <message>`` and the
    loop goes on. Local paths (``put``, ``get``, ``hash``) are relative to
    ``local_dir``.
    """

    def __init__(
        self,
        vfs: DriveVFS,
        console: Optional[Console] = None,
        history_path: Optional[Path] = None,
        local_dir: Optional[Path] = None,
    ):
        """Initialize the REPL shell.

        Args:
            vfs: Virtual filesystem to navigate
            console: Console to print to
            history_path: File to keep prompt history in (in memory if None)
            local_dir: Folder for local files (current directory if None)
        """
        self.vfs = vfs
        self.console = console or Console()
        self.history_path = history_path
        self.local_dir = Path(local_dir) if local_dir is not None else Path.cwd()
        self.running = True
        self.session: Optional[PromptSession] = None

        self.commands: Dict[str, ShellCommand] = {
            "ls": ShellCommand(0, 1, self.cmd_ls, "ls [<folder>]", "List content of remote folder"),
            "cd": ShellCommand(0, 1, self.cmd_cd, "cd [<folder>]", "Change working remote folder"),
            "pwd": ShellCommand(0, 0, self.cmd_pwd, "pwd", "Show working remote folder"),
            "info": ShellCommand(1, 1, self.cmd_info, "info <file|folder>", "Show remote file or folder information"),
            "get": ShellCommand(1, 1, self.cmd_get, "get <file>", "Download remote file to disk"),
            "put": ShellCommand(1, None, self.cmd_put, "put <local-file/folder> ... [<folder>]", "Upload local files to remote folder"),
            "catalog": ShellCommand(0, 1, self.cmd_catalog, "catalog [<folder>]", "Show catalog at remote folder"),
            "mkdir": ShellCommand(1, 1, self.cmd_mkdir, "mkdir <folder>", "Create remote folder"),
            "mv": ShellCommand(2, 2, self.cmd_mv, "mv <folder/file> <folder/file>", "Move remote folder or file"),
            "drive": ShellCommand(0, 1, self.cmd_drive, "drive [<name>]", "List drives or show one drive"),
            "find": ShellCommand(1, 1, self.cmd_find, "find <text>", "Find names containing text below working folder"),
            "hash": ShellCommand(1, 1, self.cmd_hash, "hash <local-file>", "Compute CRC32C of local file"),
            "help": ShellCommand(0, 1, self.cmd_help, "help [<command>]", "List available commands"),
            "exit": ShellCommand(0, 0, self.cmd_exit, "exit", "Bail out"),
            "quit": ShellCommand(0, 0, self.cmd_exit, "quit", "Bail out"),
        }

    def get_prompt(self) -> str:
        """Generate prompt showing current path, e.g. ``vhd:/photos/2023> ``."""
        return f"vhd:{self.vfs.pwd()}> "

    def run(self):
        """Run the shell main loop."""
        history = FileHistory(str(self.history_path)) if self.history_path else InMemoryHistory()
        self.session = PromptSession(
            history=history,
            completer=PathCompleter(self.vfs),
            style=Style.from_dict({"prompt": "ansicyan bold"}),
        )

        self.console.print("[bold cyan]vhd shell[/bold cyan] - Virtual hard drive", style="bold")
        drives = ", ".join(sorted(self.vfs.root.drives)) or "(none)"
        self.console.print(f"Drives: {drives}")
        self.console.print("Type 'help' for available commands, 'exit' to quit.\n")

        while self.running:
            try:
                line = self.session.prompt(self.get_prompt()).strip()
                if not line:
                    continue
                self.execute(line)
            except KeyboardInterrupt:
                self.console.print("\nUse 'exit' or 'quit' to exit the shell.")
                continue
            except EOFError:
                break

    def execute(self, line: str) -> bool:
        """Parse and execute a command line.

        Returns:
            True if the command succeeded
        """
        try:
            parts = shlex.split(line)
        except ValueError as e:
            self.console.print(f"[red]Parse error:[/red] {escape(str(e))}")
            return False

        if not parts:
            return True
        return self.execute_command(parts[0], parts[1:])

    def execute_command(self, name: str, args: List[str]) -> bool:
        """Check arity and run one command, reporting any failure.

        Returns:
            True if the command succeeded
        """
        command = self.commands.get(name)
        if command is None:
            self.report(name, "unknown command, type 'help' for available commands")
            return False
        if len(args) < command.min_args:
            self.report(name, f"too few arguments (expected {command.min_args}), usage: {command.usage}")
            return False
        if command.max_args is not None and len(args) > command.max_args:
            self.report(name, f"too many arguments (expected {command.max_args}), usage: {command.usage}")
            return False

        try:
            command.handler(args)
        except VHDError as e:
            self.report(name, str(e))
            return False
        except OSError as e:
            self.report(name, str(e))
            return False
        return True

    def report(self, name: str, message: str) -> None:
        self.console.print(f"[red]{escape(name)}: {escape(message)}[/red]")

    def local_path(self, path: str) -> Path:
        local = Path(path).expanduser()
        return local if local.is_absolute() else self.local_dir / local

    # Command implementations

    def cmd_ls(self, args: List[str]) -> None:
        """List folders (with file counts) and then files (with update time).

        Usage: ls [<folder>]
        """
        nodes = self.vfs.ls(args[0] if args else None)

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Name", style="white")
        table.add_column("Files", style="cyan", justify="right")
        table.add_column("Updated", style="dim")

        for node in nodes:
            if node.is_container():
                table.add_row(f"[bold blue]{escape(node.name)}/[/bold blue]", str(node.count_files()), "")
            else:
                table.add_row(escape(node.name), "", node.updated.strftime(DATE_FORMAT))

        self.console.print(table)

    def cmd_cd(self, args: List[str]) -> None:
        """Change working folder; without argument go to the root.

        Usage: cd [<folder>]
        """
        self.vfs.cd(args[0] if args else "/")

    def cmd_pwd(self, args: List[str]) -> None:
        """Print working folder.

        Usage: pwd
        """
        self.console.print(self.vfs.pwd())

    def cmd_info(self, args: List[str]) -> None:
        """Show catalog details, and stored objects for a file.

        Usage: info <file|folder>
        """
        node = self.vfs.get_node(args[0])

        table = Table(show_header=False, box=None)
        table.add_column("Field", style="cyan")
        table.add_column("Value", style="white")
        for key, value in node.get_info().items():
            if hasattr(value, "strftime"):
                value = value.strftime(DATE_FORMAT)
            table.add_row(key.replace("_", " ").capitalize(), escape(str(value)))
        if node.is_container():
            table.add_row("Files", str(node.count_files()))
        self.console.print(table)

        if node.is_file():
            storage = node.get_drive().storage
            objects = Table(show_header=True, header_style="bold magenta", title=storage.name)
            objects.add_column("Object", style="white")
            objects.add_column("Size", justify="right")
            objects.add_column("CRC32C", style="dim")
            for stat in storage.remote_stat(node.content_id, node.metadata):
                checksum = format_crc32c(stat.crc32c) if stat.crc32c is not None else ""
                objects.add_row(stat.name, format_size(stat.size), checksum)
            self.console.print(objects)

    def cmd_get(self, args: List[str]) -> None:
        """Download a remote file into the local folder, under the same name.

        Usage: get <file>
        """
        node = self.vfs.get_file(args[0])
        destination = self.local_path(node.name)
        if destination.exists():
            raise AlreadyExistsError(f"local file {destination} already exists")
        node.get_drive().storage.download(node.content_id, node.metadata, destination)
        self.console.print(f"UUID {node.content_id} downloaded to file {destination}")

    def cmd_put(self, args: List[str]) -> None:
        """Upload local files and folders (recursively, skipping hidden entries).

        The last argument is the remote folder when it is not a local path.

        Usage: put <local-file/folder> ... [<folder>]
        """
        destination = self.vfs.current
        sources = list(args)

        if len(args) > 1:
            last = args[-1]
            if self.local_path(last).exists():
                try:
                    self.vfs.get_directory(last)
                except VHDError:
                    pass
                else:
                    raise InvalidOperationError("last arg is a local file/folder and a remote folder")
            else:
                destination = self.vfs.get_directory(last)
                sources = args[:-1]

        failures = 0
        for source in sources:
            failures += self._upload(self.local_path(source), destination)
        if failures:
            self.console.print(f"\n[yellow]Number of failures: {failures}[/yellow]")

    def _upload(self, source: Path, folder: Node) -> int:
        """Upload one local entry; returns the number of failed uploads."""
        try:
            return self._upload_entry(source, folder)
        except (VHDError, OSError) as e:
            self.console.print(f"[yellow]Upload SKIPPED - {escape(str(e))}[/yellow]")
            return 1

    def _upload_entry(self, source: Path, folder: Node) -> int:
        name = source.name
        if not source.exists():
            raise NotFoundError(f"local file {source} does not exist")
        if folder.get_child(name) is not None:
            raise AlreadyExistsError(f"file {name} already exists in {folder.get_path()}")

        if source.is_dir():
            if folder.is_root():
                raise InvalidOperationError("cannot create drive")
            created = self.vfs.add_directory(folder, name)
            failures = 0
            for entry in sorted(os.listdir(source)):
                if entry.startswith("."):
                    continue
                failures += self._upload(source / entry, created)
            return failures

        drive = folder.get_drive()
        if drive is None:
            raise InvalidOperationError(f"no drive for folder: {folder.get_path()}")
        content_id = str(uuid.uuid4())
        metadata = drive.storage.upload(source, content_id)
        self.console.print(f"Uploaded {escape(str(source))} to UUID {content_id}")
        self.vfs.add_file(folder, name, content_id, metadata)
        return 0

    def cmd_catalog(self, args: List[str]) -> None:
        """Show the whole subtree below a folder.

        Usage: catalog [<folder>]
        """
        node = self.vfs.current if not args else self.vfs.get_directory(args[0])
        tree = Tree(f"[bold]{escape(node.get_path())}[/bold]")
        branches = {(): tree}
        for segments, child in walk(node):
            parent = branches[tuple(segments[:-1])]
            if child.is_container():
                label = f"[bold blue]{escape(child.name)}/[/bold blue]"
            else:
                label = f"{escape(child.name)} [dim]{child.content_id}[/dim]"
            branches[tuple(segments)] = parent.add(label)
        self.console.print(tree)

    def cmd_mkdir(self, args: List[str]) -> None:
        """Create a folder inside an existing folder or drive.

        Usage: mkdir <folder>
        """
        self.vfs.mkdir(args[0])

    def cmd_mv(self, args: List[str]) -> None:
        """Move or rename a file or folder within its drive.

        Usage: mv <folder/file> <folder/file>
        """
        self.vfs.mv(args[0], args[1])

    def cmd_drive(self, args: List[str]) -> None:
        """List the drives, or show one drive's details.

        Usage: drive [<name>]
        """
        drives = self.vfs.root.drives
        if args:
            if args[0] not in drives:
                raise NotFoundError(f"no drive named {args[0]}")
            selected = [drives[args[0]]]
        else:
            selected = [drives[name] for name in sorted(drives)]

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Drive", style="cyan")
        table.add_column("Storage", style="white")
        table.add_column("Description", style="dim")
        if args:
            table.add_column("Files", justify="right")
        for drive in selected:
            row = [escape(drive.name), escape(drive.storage.name), escape(drive.description)]
            if args:
                row.append(str(drive.count_files()))
            table.add_row(*row)
        self.console.print(table)

    def cmd_find(self, args: List[str]) -> None:
        """Find entries below the working folder whose name contains text (any case).

        Usage: find <text>
        """
        matches = find(self.vfs.current, args[0])
        for node in matches:
            suffix = "/" if node.is_container() else ""
            self.console.print(escape(node.get_path() + suffix))
        if not matches:
            self.console.print("[yellow]No matches.[/yellow]")

    def cmd_hash(self, args: List[str]) -> None:
        """Compute the CRC32C of a local file.

        Usage: hash <local-file>
        """
        checksum = crc32c_file(self.local_path(args[0]))
        self.console.print(f"CRC32C:  {format_crc32c(checksum)}")

    def cmd_help(self, args: List[str]) -> None:
        """Show help information.

        Usage: help [<command>]
        """
        if args:
            command = self.commands.get(args[0])
            if command is None:
                raise NotFoundError(f"unknown command {args[0]}")
            self.console.print(f"[bold]{escape(command.usage)}[/bold]")
            self.console.print(command.help)
            return

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Command", style="cyan")
        table.add_column("Description", style="white")
        for name in sorted(self.commands):
            command = self.commands[name]
            table.add_row(escape(command.usage), command.help)
        self.console.print(table)

    def cmd_exit(self, args: List[str]) -> None:
        """Exit the shell.

        Usage: exit
        """
        self.running = False
        self.console.print("[cyan]Goodbye![/cyan]")
