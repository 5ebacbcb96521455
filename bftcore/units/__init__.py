"""Sub-package set aside for consensus units; it holds no modules."""