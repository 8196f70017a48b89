from portsweep.version import VERSION

__version__ = VERSION
