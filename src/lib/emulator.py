"""
Runtime event emulator delivery

The behavior library lives in assets/js/rodix-emulator.js. This module
prefixes it with the naming conventions (window.RODIX_CONFIG) and holds the
Python reference of the library's button rules, which the tests pin down.
"""

import json
from pathlib import Path
from typing import Iterable, Optional

from ..models.emulator import BUTTON_RULES, ButtonAction, ButtonContext, ButtonRule, EmulatorConfig

ASSETS_DIR = Path(__file__).parent.parent / "assets"
LIBRARY_PATH = ASSETS_DIR / "js" / "rodix-emulator.js"


def button_classify(context: ButtonContext, rules: Iterable[ButtonRule] = BUTTON_RULES) -> ButtonAction:
    """
    Action for a clicked button; the first matching rule wins

    Example:
        >>> button_classify(ButtonContext(button_id="btnAddItem"))
        <ButtonAction.ADD: 'add'>
    """
    for rule in rules:
        if rule.matches(context):
            return rule.action
    return ButtonAction.NONE


def keyword_find(context: ButtonContext, rule: ButtonRule) -> Optional[str]:
    """First keyword of rule found in the button's id or label"""
    button_id, label = context.button_id.lower(), context.label.lower()
    for keyword in rule.keywords:
        if keyword in button_id or keyword in label:
            return keyword
    return None


def siblingId_derive(button_id: str, keyword: Optional[str], prefix: str,
                     config: Optional[EmulatorConfig] = None) -> str:
    """
    Id of the element a button acts on

    The button prefix and the matched keyword are removed from the
    button id and the target prefix is put in front.

    Example:
        >>> siblingId_derive("btnAddGain", "add", "select")
        'selectGain'
    """
    config = config or EmulatorConfig()
    base = button_id
    if base.lower().startswith(config.button_id_prefix.lower()):
        base = base[len(config.button_id_prefix):]
    if keyword:
        index = base.lower().find(keyword)
        if index >= 0:
            base = base[:index] + base[index + len(keyword):]
    return prefix + base


def panelId_derive(tab_id: str, config: Optional[EmulatorConfig] = None) -> Optional[str]:
    """Panel shown by a tab button, None when the id lacks the tab prefix"""
    config = config or EmulatorConfig()
    if not tab_id.startswith(config.tab_id_prefix):
        return None
    return config.panel_id_prefix + tab_id[len(config.tab_id_prefix):]


class RuntimeEmulator:
    """
    Builds the client-side emulator script for a page

    Attributes:
        config: Naming conventions serialized into window.RODIX_CONFIG
    """

    def __init__(self, config: Optional[EmulatorConfig] = None) -> None:
        self.config = config or EmulatorConfig()

    def library_load(self) -> str:
        return LIBRARY_PATH.read_text(encoding='utf-8')

    def configScript_make(self) -> str:
        return f"window.RODIX_CONFIG = {json.dumps(self.config.to_dict(), indent=2)};"

    def bundle(self) -> str:
        """Configuration assignment followed by the library"""
        return f"{self.configScript_make()}\n\n{self.library_load()}"
