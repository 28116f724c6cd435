#!/usr/bin/env python3
"""
Basic azdo-panel usage example.

Runs entirely offline against the scripted mock client.
Run with: python examples/basic_usage.py
"""

import asyncio

from azdo_panel import (
    AzureDevOpsError,
    CredentialStore,
    MemoryClipboard,
    MemoryStore,
    PanelController,
    ServerError,
    ValidationError,
    build_clone_url,
    slug_of,
)
from azdo_panel.testing import MockDevOpsClient, create_mock_project, create_mock_repository

print("=== azdo-panel Basic Usage Example ===\n")

# 1. Exception hierarchy
print("1. Testing exception classes...")
try:
    raise ValidationError("MISSING_CREDENTIALS", "Organization URL is required")
except AzureDevOpsError as e:
    print(f"   Caught AzureDevOpsError: {e}")
    print(f"   Code: {e.code}, Message: {e.message}")

print("\n   OK: Exception classes working\n")

# 2. Clone URLs
print("2. Testing clone URLs...")
for org_url in ("https://dev.azure.com/acme", "https://acme.visualstudio.com"):
    print(f"   {org_url}")
    print(f"     slug:  {slug_of(org_url)}")
    print(f"     https: {build_clone_url('https', org_url, 'My Proj', 'core')}")
    print(f"     ssh:   {build_clone_url('ssh', org_url, 'My Proj', 'core')}")

assert build_clone_url("https", "https://dev.azure.com/acme", "My Proj", "core") == (
    "https://acme@dev.azure.com/acme/My%20Proj/_git/core"
)

print("\n   OK: Clone URLs working\n")

# 3. Controller against a scripted organization
print("3. Testing the panel controller...")

client = MockDevOpsClient()
client.configure_projects(
    [
        create_mock_project("p-1", "Platform", description="Shared services"),
        create_mock_project("p-2", "Mobile"),
    ]
)
client.configure_repositories(
    "p-1",
    [
        create_mock_repository("r-1", "api-gateway", "p-1"),
        create_mock_repository("r-2", "widget-service", "p-1"),
    ],
)
client.configure_repositories("p-2", error=ServerError("HTTP_500", "Internal error", 500))

clipboard = MemoryClipboard()
panel = PanelController(CredentialStore(MemoryStore()), client, clipboard)


async def main() -> None:
    async with panel:
        await panel.connect("https://dev.azure.com/acme", "example-token-1234")
        print(f"   Projects: {[p.name for p in panel.projects]}")
        print(f"   Failed projects: {list(panel.cache.repository_errors)}")

        panel.set_query("widget")
        for project in panel.filtered_view.projects:
            names = [r.name for r in panel.filtered_view.repositories_for(project.id)]
            print(f"   '{panel.query}' matches {project.name}: {names}")

        command = await panel.copy("ssh", "Platform", "widget-service", "r-2")
        print(f"   Clipboard: {clipboard.text}")
        assert clipboard.text == command
        assert panel.copy_feedback is not None


asyncio.run(main())

print("\n   OK: Panel controller working\n")
