# Services package for formarchive
