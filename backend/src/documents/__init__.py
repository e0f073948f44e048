"""Document ingestion feature: upload protocol, lifecycle and storage cleanup"""
