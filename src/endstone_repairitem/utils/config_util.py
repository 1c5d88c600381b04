import json
import os
import copy
from collections import OrderedDict

CONFIG_FOLDER = os.path.join(os.getcwd(), 'plugins', 'repairitem_data')
CONFIG_PATH = os.path.join(CONFIG_FOLDER, 'config.json')

DEFAULT_CONFIG = OrderedDict({
    "functions": OrderedDict({
        "all": ["all"],
        "inventory": ["inventory", "inv"],
        "armor": ["armor"],
        "hotbar": ["hotbar"],
        "both_hands": ["both_hands", "hands"],
        "main_hand": ["main_hand", "hand"],
        "off_hand": ["off_hand", "offhand"],
        "reload": ["reload"],
        "help": ["help"]
    }),
    "all_target": ["*", "all"],
    "blocked_items": [],
    "metrics": True,
    "logging": OrderedDict({
        "notify_staff": True,
        "discord": OrderedDict({
            "enabled": False,
            "webhook": "",
            "embed": OrderedDict({
                "title": "RepairItem",
                "color": 781919
            })
        })
    }),
    "messages": OrderedDict({
        "invalid_format": "§cInvalid command format! Use §e/repair help §cto see the available functions.",
        "no_permission": "§cYou do not have permission to do this!",
        "reload": "§aRepairItem was reloaded.",
        "help": [
            "§6RepairItem Help:",
            "§7-------------------------",
            "§e/repair all [player|*] §7- Repairs all items.",
            "§e/repair inventory [player|*] §7- Repairs inventory items, without the armor.",
            "§e/repair armor [player|*] §7- Repairs the armor.",
            "§e/repair hotbar [player|*] §7- Repairs hotbar items.",
            "§e/repair both_hands [player|*] §7- Repairs items in both hands.",
            "§e/repair main_hand [player|*] §7- Repairs the main-hand.",
            "§e/repair off_hand [player|*] §7- Repairs the off-hand.",
            "§e/repair reload §7- Reloads the plugin.",
            "§e/repair help §7- Displays this page."
        ],
        "repair": OrderedDict({
            "sender": OrderedDict({
                "error": OrderedDict({
                    "players_only": "§cThis command can only be executed by a player",
                    "player_offline": "§cNo matching player is online",
                    "no_players_online": "§cThere are no players online"
                }),
                "target_placeholder": OrderedDict({
                    "self": "you",
                    "all": "all players"
                }),
                "success": OrderedDict({
                    "all": "§aRepaired §e{repaired} §aitem(s) of §e{target}§a.",
                    "inventory": "§aRepaired §e{repaired} §ainventory item(s) of §e{target}§a.",
                    "armor": "§aRepaired §e{repaired} §aarmor piece(s) of §e{target}§a.",
                    "hotbar": "§aRepaired §e{repaired} §ahotbar item(s) of §e{target}§a.",
                    "both_hands": "§aRepaired §e{repaired} §aitem(s) held by §e{target}§a.",
                    "main_hand": "§aRepaired the main-hand item of §e{target}§a.",
                    "off_hand": "§aRepaired the off-hand item of §e{target}§a."
                }),
                "fail": OrderedDict({
                    "not_repaired": "§cNo items of §e{target} §cneeded repairing.",
                    "unsupported": "§cThis function is not supported on this server.",
                    "unknown": "§cSomething went wrong while repairing, please check the console."
                })
            }),
            "target": OrderedDict({
                "source_placeholder": OrderedDict({
                    "console": "Console"
                }),
                "success": OrderedDict({
                    "all": "§e{sender} §arepaired §e{repaired} §aof your items.",
                    "inventory": "§e{sender} §arepaired §e{repaired} §aof your inventory items.",
                    "armor": "§e{sender} §arepaired §e{repaired} §aof your armor pieces.",
                    "hotbar": "§e{sender} §arepaired §e{repaired} §aof your hotbar items.",
                    "both_hands": "§e{sender} §arepaired §e{repaired} §aof your held items.",
                    "main_hand": "§e{sender} §arepaired your main-hand item.",
                    "off_hand": "§e{sender} §arepaired your off-hand item."
                }),
                "fail": OrderedDict({
                    "not_repaired": "",
                    "unsupported": "",
                    "unknown": ""
                })
            })
        })
    })
})

cache = None


def set_config_folder(folder: str):
    """Points the config at the plugin's data folder and drops the cached copy."""
    global CONFIG_FOLDER, CONFIG_PATH, cache
    CONFIG_FOLDER = folder
    CONFIG_PATH = os.path.join(CONFIG_FOLDER, 'config.json')
    cache = None


def load_config(refresh: bool = False) -> dict:
    """Load or create the configuration file, cached in memory."""
    global cache
    if cache is not None and not refresh:
        return cache

    default_config = copy.deepcopy(DEFAULT_CONFIG)

    if not os.path.exists(CONFIG_PATH):
        os.makedirs(CONFIG_FOLDER, exist_ok=True)
        cache = default_config
        save_config(cache)
        return cache

    try:
        content = open_text_file(CONFIG_PATH, "r")
        if content:
            loaded = json.loads(content, object_pairs_hook=OrderedDict)
            if not isinstance(loaded, dict):
                raise ValueError("config root must be an object")
            cache = loaded
        else:
            cache = default_config
            save_config(cache)
    except (OSError, ValueError) as e:
        print(f"[RepairItem] Could not read config.json ({e}), falling back to the defaults.")
        cache = default_config
        save_config(cache)

    return cache


def save_config(config: dict, update_cache: bool = False) -> None:
    global cache
    if update_cache:
        cache = config

    os.makedirs(CONFIG_FOLDER, exist_ok=True)
    text = json.dumps(config, indent=4, ensure_ascii=False)
    open_text_file(CONFIG_PATH, "w", text=text)


def merge_defaults(config: dict, defaults: dict, path: str = "") -> bool:
    """Adds every key missing from config, recursing into sections.

    Existing values are kept, unless a section or list holds a value of another type;
    those are reset to the default with a console warning.
    """
    changed = False
    for key, default in defaults.items():
        key_path = f"{path}{key}"
        if key not in config:
            config[key] = copy.deepcopy(default)
            changed = True
        elif isinstance(default, dict):
            if isinstance(config[key], dict):
                changed = merge_defaults(config[key], default, key_path + ".") or changed
            else:
                print(f"[RepairItem] '{key_path}' in config.json must be a section, using the defaults.")
                config[key] = copy.deepcopy(default)
                changed = True
        elif isinstance(default, list) and not isinstance(config[key], (list, str)):
            print(f"[RepairItem] '{key_path}' in config.json must be a list, using the defaults.")
            config[key] = copy.deepcopy(default)
            changed = True
    return changed


def preload_settings() -> dict:
    """Load the config and fill in missing defaults, saving only if something was added."""
    config = load_config()

    if merge_defaults(config, DEFAULT_CONFIG):
        try:
            save_config(config)
        except OSError as e:
            print(f"[RepairItem] Failed to save config.json: {e}. Existing file left untouched.")

    return config


def open_text_file(path: str, mode: str = "r", text: str = None) -> str | None:
    """
    Universal text file handler.
    - For reading: mode="r", returns file content as str.
    - For writing: mode="w", text=<string to write>
    Tries UTF-8, UTF-8-sig, Latin-1, CP1252 automatically.
    """
    encodings = ["utf-8", "utf-8-sig", "latin-1", "cp1252"]

    if "r" in mode:
        for enc in encodings:
            try:
                with open(path, mode, encoding=enc) as f:
                    return f.read()
            except (UnicodeDecodeError, FileNotFoundError):
                continue
        return None

    elif "w" in mode and text is not None:
        for enc in encodings:
            try:
                with open(path, mode, encoding=enc) as f:
                    f.write(text)
                    return text
            except UnicodeEncodeError:
                continue
        return None

    else:
        raise ValueError("Invalid mode or missing text for writing.")
