"""Reliable multicast: signature collection, rebroadcast scheduling and the service tying them together."""