import sys
from pathlib import Path

from tinybasic import Interpreter, StandardIO, ConfigError, load_config


class _CountingIO(StandardIO):
    """StandardIO that remembers how many errors it reported."""
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.error_count = 0

    def show_error(self, message: str):
        self.error_count += 1
        super().show_error(message)


def run_script_file(file_path: str, config):
    """Feed a BASIC source file to a fresh session and exit with appropriate status."""
    p = Path(file_path)
    try:
        handle = p.open(encoding="utf-8")
    except FileNotFoundError:
        print(f"Error: file not found: {file_path}", file=sys.stderr)
        raise SystemExit(1)
    with handle:
        io = _CountingIO(prompt=config.prompt, stdin=handle, interactive=False)
        Interpreter(io, config).interpret_input()
    if io.error_count:
        raise SystemExit(1)


def parse_args(argv):
    """Returns (config_path, script_path) from the command line."""
    config_path = None
    script = None
    args = list(argv)
    while args:
        arg = args.pop(0)
        if arg == "--config":
            if not args:
                print("Error: --config needs a file name", file=sys.stderr)
                raise SystemExit(2)
            config_path = args.pop(0)
        elif arg.startswith("--config="):
            config_path = arg.split("=", 1)[1]
        elif not arg.startswith("-") and script is None:
            script = arg
        else:
            print(f"Error: unexpected argument: {arg}", file=sys.stderr)
            raise SystemExit(2)
    return config_path, script


def main(argv=None):
    """Run a program file when provided, otherwise start the interactive REPL."""
    config_path, script = parse_args(sys.argv[1:] if argv is None else argv)
    try:
        config = load_config(config_path)
    except ConfigError as e:
        print(f"ConfigError: {e.message}", file=sys.stderr)
        raise SystemExit(2)

    if script is not None:
        run_script_file(script, config)
        return

    print("Tiny BASIC v0.1")
    print("Type 'exit' or press Ctrl+D to quit.")

    interpreter = Interpreter(StandardIO(prompt=config.prompt), config)

    # REPL Loop
    while True:
        interpreter.io.show_prompt()
        line = interpreter.read_input_line()
        if line is None:
            print("\nExiting.")
            break
        if line.strip().lower() == "exit":
            break
        interpreter.handle_line(line)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\nExiting.")
