"""OneWol: Wake-on-LAN device book and broadcast dispatcher."""

__version__ = "0.1.0"
