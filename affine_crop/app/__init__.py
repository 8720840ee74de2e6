"""Scene, crop session and follow/sync.

- `scene.Scene`: reference object stack and Qt signal event bus
- `session.CropSession`: enter/confirm/cancel state machine driving the solvers
- `follow`: keeps confirmed crops and their backing images aligned
"""
