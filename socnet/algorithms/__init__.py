"""Analysis mixins composed into :class:`socnet.core.graph.SocNet`."""
