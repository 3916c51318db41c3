# tidyup - group the files of a directory into category folders

__version__ = "1.0.0"
__app_name__ = "tidyup"
