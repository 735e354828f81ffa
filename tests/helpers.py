"""Builders for change directive markup used across tests."""

from __future__ import annotations


def change_block(search: str, replace: str) -> str:
    return (
        f"<change><search><![CDATA[{search}]]></search>"
        f"<replace><![CDATA[{replace}]]></replace></change>"
    )
