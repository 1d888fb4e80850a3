"""PLIVE TV core: the single-active-player feed engine and the character chat overlay."""
