import os
import re
from configparser import ConfigParser, Error as ConfigParserError, NoOptionError, NoSectionError
from typing import Dict, Any, Optional, List

from base_classes import ConfigProvider


DEFAULT_PACMAN_CONF = '/etc/pacman.conf'
DEFAULT_DB_PATH = '/var/lib/pacman/'
DEFAULT_ROOT_DIR = '/'


class ConfigManager(ConfigProvider):
    """
    Immutable configuration manager - reads config files once and answers
    option, macro and package database lookups for the session
    """

    def __init__(self, config_file: Optional[str] = None):
        self.base_config = self._load_configs(config_file)

    def _load_configs(self, config_file: Optional[str] = None) -> ConfigParser:
        """
        Load and merge configuration files
        :param config_file: optional path to a custom config file
        :return: ConfigParser object
        """
        # Get the default config file path and make sure it exists
        default_config_file = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'core', 'config.ini')
        if not os.path.exists(default_config_file):
            raise FileNotFoundError(f'Could not find the default config file at {default_config_file}')

        # Instantiate the config parser and read the config files; macro names keep their case
        config = ConfigParser(interpolation=None)
        config.optionxform = str
        config.read(default_config_file)

        # Get the user config location from the default config file and check and read it
        if 'user_config' in config['DEFAULT']:
            user_config = self.resolve_file_path(config['DEFAULT']['user_config'])
            if user_config is not None:
                config.read(user_config)

        # If a custom config file was specified, check and read it
        if config_file is not None:
            file = self.resolve_file_path(config_file)
            if file is None:
                raise FileNotFoundError(f'Could not find the custom config file at {config_file}')
            config.read(file)

        return config

    def get_option(self, section: str, option: str, fallback: Any = None) -> Any:
        """Get an option from the base configuration"""
        try:
            return self.fix_values(self.base_config.get(section, option))
        except (NoSectionError, NoOptionError):
            return fallback

    def get_all_options_from_section(self, section: str) -> Dict[str, Any]:
        """Options defined in the section itself, without [DEFAULT] fallthrough"""
        if not self.base_config.has_section(section):
            return {}
        defaults = self.base_config.defaults()
        return {
            option: self.fix_values(self.base_config.get(section, option))
            for option in self.base_config.options(section)
            if option not in defaults or self.base_config.get(section, option) != defaults[option]
        }

    def macro_table(self) -> Dict[str, str]:
        """Macro name -> command string; values are kept verbatim"""
        if not self.base_config.has_section('MACROS'):
            return {}
        defaults = self.base_config.defaults()
        table = {}
        for name in self.base_config.options('MACROS'):
            if name in defaults:
                continue
            value = self.base_config.get('MACROS', name).strip()
            if value:
                table[name] = value
        return table

    def pacman_settings(self) -> Dict[str, Any]:
        """
        Resolve the package database location and repositories
        :return: dict with root_dir, db_path and repos
        """
        settings: Dict[str, Any] = {
            'root_dir': DEFAULT_ROOT_DIR,
            'db_path': DEFAULT_DB_PATH,
            'repos': [],
        }

        pacman_conf = self.get_option('DEFAULT', 'pacman_conf', DEFAULT_PACMAN_CONF)
        if pacman_conf and os.path.isfile(pacman_conf):
            settings.update(parse_pacman_conf(pacman_conf))

        overrides = self.get_all_options_from_section('PACMAN')
        for key in ('root_dir', 'db_path'):
            if overrides.get(key):
                settings[key] = str(overrides[key])
        repos = overrides.get('repos')
        if isinstance(repos, list):
            settings['repos'] = [str(r) for r in repos]
        elif isinstance(repos, str) and repos.strip():
            settings['repos'] = [r.strip() for r in repos.split(',') if r.strip()]

        return settings

    @staticmethod
    def fix_values(value: Any) -> Any:
        """Fix some values due to how they are stored and retrieved with ConfigParser"""
        if isinstance(value, str):
            value = value.strip()

            # Handle path expansion only for strings that clearly look like paths
            if (value.startswith(('~', './', '/', '\\')) and
                    not value.startswith(('{', '[', '"', "'"))):
                expanded = os.path.expanduser(value)
                if expanded != value:
                    value = expanded

            # Handle list-like strings
            if value.startswith('[') and value.endswith(']'):
                return [ConfigManager.fix_values(item.strip()) for item in re.findall(r'[^,\s]+', value[1:-1])]

            # Check for integer values
            if value.isdigit():
                return int(value)

            # Handle boolean values
            lower_value = value.lower()
            if lower_value in ('true', 'yes'):
                return True
            if lower_value in ('false', 'no'):
                return False

            # Remove quotes if present
            if (value.startswith('"') and value.endswith('"')) or (value.startswith("'") and value.endswith("'")):
                return value[1:-1]

        # Return as is for other cases
        return value

    @staticmethod
    def resolve_file_path(file_name: str, base_dir: Optional[str] = None) -> Optional[str]:
        """
        Works out the path to a file based on the filename and optional base directory
        :param file_name: name of the file to resolve the path to
        :param base_dir: optional base directory to resolve the path from
        :return: absolute path to the file or None
        """
        if file_name is None:
            return None

        # If base_dir is not specified, use the current working directory
        if base_dir is None:
            base_dir = os.getcwd()
        # If base_dir is a relative path, convert it to an absolute path based on the main.py directory
        elif not os.path.isabs(base_dir):
            main_dir = os.path.dirname(os.path.abspath(__file__))
            base_dir = os.path.abspath(os.path.join(main_dir, base_dir))
        base_dir = os.path.expanduser(base_dir)

        file_name = os.path.expanduser(file_name)
        if os.path.isabs(file_name):
            return file_name if os.path.isfile(file_name) else None

        full_path = os.path.join(base_dir, file_name)
        if os.path.isfile(full_path):
            return full_path
        return None


def parse_pacman_conf(path: str) -> Dict[str, Any]:
    """
    Read RootDir, DBPath and the repository list from a pacman.conf
    :param path: path to pacman.conf
    :return: dict with any of root_dir, db_path, repos found
    """
    parser = ConfigParser(allow_no_value=True, strict=False, interpolation=None,
                          comment_prefixes=('#',), inline_comment_prefixes=('#',))
    parser.optionxform = str
    try:
        parser.read(path)
    except ConfigParserError:
        return {}

    found: Dict[str, Any] = {}
    if parser.has_section('options'):
        root_dir = parser.get('options', 'RootDir', fallback=None)
        db_path = parser.get('options', 'DBPath', fallback=None)
        if root_dir:
            found['root_dir'] = root_dir.strip()
        if db_path:
            found['db_path'] = db_path.strip()
    repos: List[str] = [s for s in parser.sections() if s != 'options']
    found['repos'] = repos
    return found
