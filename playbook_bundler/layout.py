"""Fixed names used inside the staging area and therefore inside bundles."""

from __future__ import annotations

__all__ = [
    "ANSIBLE_CONFIG_NAME",
    "ENTRYPOINT_NAME",
    "INSTALL_METADATA_NAME",
    "PLAYBOOK_NAME",
    "REQUIREMENTS_NAME",
    "RESERVED_STAGING_NAMES",
    "ROLES_DIR_NAME",
    "RUNTIME_REQUIREMENTS_NAME",
    "VARS_NAME",
]

PLAYBOOK_NAME = "playbook.yml"
REQUIREMENTS_NAME = "requirements.yml"
VARS_NAME = "vars.yml"
ROLES_DIR_NAME = "roles"
ANSIBLE_CONFIG_NAME = "ansible.cfg"
RUNTIME_REQUIREMENTS_NAME = "requirements.txt"
ENTRYPOINT_NAME = "run-playbook.sh"

# Written by ``ansible-galaxy install`` into each role's ``meta`` directory.
INSTALL_METADATA_NAME = ".galaxy_install_info"

RESERVED_STAGING_NAMES: frozenset[str] = frozenset(
    {
        PLAYBOOK_NAME,
        REQUIREMENTS_NAME,
        VARS_NAME,
        ROLES_DIR_NAME,
        ANSIBLE_CONFIG_NAME,
        RUNTIME_REQUIREMENTS_NAME,
        ENTRYPOINT_NAME,
    }
)
