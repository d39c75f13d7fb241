"""HTTP front end for reviewgate."""
