"""Location resolution: turn a dual-strategy location hint into a concrete rectangle."""
