"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

COMMANDS = ["split", "merge", "verify", "info", "storage", "clear", "exit", "help"]

PATH_COMMANDS = ("split", "merge", "verify", "info")

SPLIT_OPTIONS = ("--compress", "--no-compress", "--size", "--unit")

STYLE = Style.from_dict(
    {
        "prompt": "#2E9E6B bold",
        "command": "#0088ff bold",
    }
)

GREEN = "\033[38;2;46;158;107m"
RESET = "\033[0m"

WELCOME_TITLE = f"{GREEN}chunkstore{RESET} - verified file splitting and merging"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

PROMPT_TEXT = "chunkstore> "

HELP_TEXT = """Available commands:
  split <file> [options]              Split a file into a verified chunk set
      --compress / --no-compress      Wrap chunks and manifest in ZIP archives
      --size N --unit B|KB|MB         Chunk size (below 16 KiB falls back to 64 KiB)
  merge <manifest> [output_path]      Verify chunks and rebuild the original file
  verify <manifest>                   Verify every chunk without writing output
  info <manifest>                     Show the manifest of a chunk set
  storage [mode] [path]               Show storage root, or set mode: application,
                                      temporary, custom <path>
  clear                               Clear screen and redisplay welcome message
  help                                Show this help
  exit                                Exit REPL

<manifest> is the info.json of a chunk set, or <fingerprint>.zip when compressed.
Examples:
  split videos/movie.mp4 --size 4 --unit MB
  split report.pdf --compress
  verify /tmp/storages/<fingerprint>/info.json
  merge /tmp/storages/<fingerprint>/<fingerprint>.zip restored.pdf
  storage custom ~/chunks"""
