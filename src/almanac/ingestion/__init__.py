"""Holiday file ingestion: discovery, reading and date-column detection."""
