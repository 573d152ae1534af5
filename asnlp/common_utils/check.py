import numpy as np

class bcolors:
    HEADER = '\033[95m'
    OKBLUE = '\033[94m'
    OKCYAN = '\033[96m'
    OKGREEN = '\033[92m'
    WARNING = '\033[93m'
    FAIL = '\033[91m'
    ENDC = '\033[0m'
    BOLD = '\033[1m'
    UNDERLINE = '\033[4m'

def RIGHT_SHAPE(X, shape:tuple):
    ''' if tuple has -1 shape, then that axis is omitted
        the check is an assert, it is stripped under python -O
    '''
    X_shape = np.shape(X)
    assert len(X_shape) == len(shape), "X has {0} axis, but desired {1}.".format(len(X_shape), len(shape))
    for i in range(len(X_shape)):
        if shape[i] == -1:
            continue
        assert X_shape[i] == shape[i], "At {0} axis, X has shape {1}, but desired {2}.".format(i, X_shape[i], shape[i])

def IN_RANGE(j, n:int):
    ''' j has to be an integer index in [0, n)
    '''
    if not isinstance(j, (int, np.integer)) or isinstance(j, bool):
        raise IndexError("Index {0} is not an integer.".format(j))
    if j < 0 or j >= n:
        raise IndexError("Index {0} out of range [0, {1}).".format(j, n))
        
def WARNING(indicator:bool, info:str, info_level:int):
    ''' if indicator is true then print the info
    '''
    if indicator and info_level >= 2:
        print(f"{bcolors.WARNING}{info}{bcolors.ENDC}")
        
def REPORT_VALUE(input_value:float, info:str, info_level:int):
    ''' print the value with its description
    '''
    if info_level >= 1:
        print("{0} {1:.4e}".format(info, input_value))
        
def PRINT(symbol:str, info_level:int):
    ''' print a symbol without line break
    '''
    if info_level >= 1:
        print("{0}".format(symbol), end="")
