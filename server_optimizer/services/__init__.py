"""
Server Optimizer Services

- host     - game server adapter interface
- config   - YAML configuration store
- notify   - message catalog and privileged notifier
- control  - FPS policy and control loop
- commands - permission-gated chat/console commands
"""
