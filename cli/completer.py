"""Custom completer for the chunkstore CLI with path autocompletion."""

from typing import Iterable

from prompt_toolkit.completion import Completer, Completion, PathCompleter
from prompt_toolkit.document import Document

from cli.constants import COMMANDS, PATH_COMMANDS, SPLIT_OPTIONS


class ChunkStoreCompleter(Completer):
    """
    Custom completer that provides:
    - Command name completion for the first token
    - Option completion for 'split'
    - File path completion for the arguments of file-taking commands
    """

    def __init__(self):
        self._paths = PathCompleter(expanduser=True)

    def get_completions(
        self, document: Document, complete_event
    ) -> Iterable[Completion]:
        text = document.text_before_cursor
        tokens = text.split()

        is_typing_new_token = text.endswith(" ") or not tokens

        if not tokens or (len(tokens) == 1 and not is_typing_new_token):
            yield from self._complete_commands(tokens[0] if tokens else "")
            return

        command = tokens[0].lower()
        if command not in PATH_COMMANDS:
            return

        current_word = "" if is_typing_new_token else tokens[-1]

        if command == "split" and current_word.startswith("-"):
            for option in SPLIT_OPTIONS:
                if option.startswith(current_word) and option not in tokens[1:-1]:
                    yield Completion(option, start_position=-len(current_word))
            return

        word_document = Document(current_word, len(current_word))
        yield from self._paths.get_completions(word_document, complete_event)

    def _complete_commands(self, partial: str) -> Iterable[Completion]:
        """Complete command names matching the partial input."""
        partial_lower = partial.lower()
        for cmd in COMMANDS:
            if cmd.startswith(partial_lower):
                yield Completion(cmd, start_position=-len(partial))
