import asyncio
import sys
import readchar
from mctap.tools import Tool

class Console:
    def __init__(self, stop_event: asyncio.Event, proxy=None):
        self.input_buffer = ""
        self.stop_event = stop_event
        self.proxy = proxy
        self.commands = {
            "help": (self.help, "show this menu"),
            "sessions": (self.sessions, "list proxied sessions"),
            "memory": (self.memory, "show the RAM usage in MB"),
            "ping": (self.ping, "query the upstream server status"),
            "cls": (self.cls, "clears the console"),
            "stop": (self.stop, "shut the proxy down")
        }

    def redraw_prompt(self):
        prompt = colored("> ", "green")
        line = prompt + self.input_buffer
        sys.stdout.write('\r\x1b[2K')
        sys.stdout.write(line)
        sys.stdout.flush()

    def print(self, text: str):
        sys.stdout.write('\r\x1b[2K')
        sys.stdout.write(text + '\n')
        self.redraw_prompt()

    async def execute(self, line: str):
        name = line.strip().lower()
        if not name:
            return
        command = self.commands.get(name)
        if command is None:
            self.print(colored(f"Wrong command: {line}"))
            self.print(colored("Type \"help\" for help -_-"))
            return
        await command[0]()

    async def input(self):
        while not self.stop_event.is_set():
            try:
                key = await asyncio.to_thread(readchar.readkey)
            except KeyboardInterrupt:
                self.stop_event.set()
                break

            if key in ('\r', '\n'):
                line, self.input_buffer = self.input_buffer, ""
                sys.stdout.write('\n')
                await self.execute(line)
                self.redraw_prompt()
            elif key in ('\x7f', '\b'):
                self.input_buffer = self.input_buffer[:-1]
                self.redraw_prompt()
            elif key.isprintable():
                self.input_buffer += key
                self.redraw_prompt()

    #-----------------------------------------------------------

    async def help(self):
        self.print(colored("--------------help------------------", "cyan"))
        for name, (_, text) in self.commands.items():
            self.print(f" {colored(name.ljust(8), 'green')} - {text}")
        self.print(colored("------------------------------------", "cyan"))

    async def sessions(self):
        sessions = list(self.proxy.sessions.values()) if self.proxy else []
        if not sessions:
            self.print(colored("No active sessions", "gray"))
        for session in sessions:
            self.print(session.describe())

    async def memory(self):
        self.print(f"Memory usage: {colored(f'{Tool.memory_usage():.2f} MB', 'cyan')}")

    async def ping(self):
        host, port = await self.proxy.upstream()
        result = await asyncio.to_thread(Tool.ping_minecraft_server, host, port)
        if "error" in result:
            self.print(colored(result["error"]))
        else:
            self.print(f"{host}:{port} {colored(result['version'], 'cyan')} (protocol {result['protocol']}) "
                       f"{result['players_online']}/{result['players_max']} players, {result['latency']:.0f} ms")

    async def cls(self):
        from os import system, name
        system('cls' if name == 'nt' else 'clear')

    async def stop(self):
        self.stop_event.set()

def colored(text, color="red"):
    colors = {
        "black": "\033[30m",
        "red": "\033[31m",
        "green": "\033[32m",
        "yellow": "\033[33m",
        "blue": "\033[34m",
        "magenta": "\033[35m",
        "cyan": "\033[36m",
        "white": "\033[37m",
        "gray": "\033[90m",
        "reset": "\033[0m"
    }
    return f"{colors.get(color, colors['red'])}{text}{colors['reset']}"
