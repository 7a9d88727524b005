import os

class Config:
    def __init__(self, filepath="proxy.properties"):
        self.filepath = filepath
        self._properties = {}

        self._default_values = {
            "listen-ip": "0.0.0.0",
            "listen-port": "25567",
            "server-ip": "127.0.0.1",
            "server-port": "25566",
            "buffer-size": "4096",
            "read-timeout": "0",
            "connect-timeout": "5",
            "frame-carry-over": "true",
            "max-frame-size": "2097155",
            "log-levels": "INFO,WARN,ERROR",
            "log-to-file": "true",
            "logs-folder": "logs"
        }

    def load(self, filepath=None):
        filepath = filepath or self.filepath
        self.filepath = filepath

        if not os.path.exists(filepath):
            with open(filepath, "w", encoding="utf-8") as f:
                f.write("# Minecraft tapping proxy properties\n")
                for key, value in self._default_values.items():
                    f.write(f"{key}={value}\n")

        self._properties.clear()
        with open(filepath, "r", encoding="utf-8") as file:
            for line in file:
                line = line.strip()
                if line and not line.startswith("#"):
                    key, _, value = line.partition("=")
                    self._properties[key.strip()] = value.strip()
        return self

    def set(self, key, value):
        self._properties[key] = str(value)

    def get(self, key, default=None):
        if key in self._properties:
            return self._properties[key]
        return self._default_values.get(key, default)

    def get_int(self, key, default=0) -> int:
        value = self.get(key)
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def get_float(self, key, default=0.0) -> float:
        value = self.get(key)
        try:
            return float(value)
        except (TypeError, ValueError):
            return default

    def get_bool(self, key, default=False) -> bool:
        value = self.get(key)
        if value is None:
            return default
        return value.strip().lower() in ("true", "1", "yes", "on")

    def get_list(self, key, default=()) -> list[str]:
        value = self.get(key)
        if not value:
            return list(default)
        return [item.strip() for item in value.split(",") if item.strip()]

config = Config()
