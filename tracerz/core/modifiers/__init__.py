"""Modifiers: named post-processing applied to a node's flattened value.

String modifiers transform text. Tree and node modifiers run for their side
effects (for example `pop!!` drops a runtime override) and contribute "".
"""
