"""fuzzing engines built on the forge harness"""
