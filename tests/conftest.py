pytest_plugins = ["azdo_panel.testing.conftest"]
