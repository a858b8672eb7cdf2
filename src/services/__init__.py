"""Services used by the scaffolded learning engine."""
