# Service classes that query the data source and shape unit, directory, import, and search view models.
